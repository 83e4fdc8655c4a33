"""
Integration tests for the retried transaction runner
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.models.enums import UserRole
from app.models.user import User
from app.repos.user_repo import create_user
from app.services.exceptions import NotFound, StoreUnavailableError
from app.services.transactions import RetryPolicy, TransactionRunner

pytestmark = pytest.mark.integration


def _locked():
    return OperationalError("UPDATE invitations", {}, Exception("database is locked"))


async def _count_users(session):
    result = await session.execute(select(func.count()).select_from(User))
    return result.scalar_one()


async def test_commits_on_success(runner):
    await runner.run(create_user, email="a@example.com", password_hash="x", role=UserRole.ADMIN)

    assert await runner.run(_count_users) == 1


async def test_rolls_back_on_domain_error_without_retry(runner):
    calls = []

    async def create_then_fail(session):
        calls.append(1)
        await create_user(session, email="a@example.com", password_hash="x")
        raise NotFound("nothing here")

    with pytest.raises(NotFound):
        await runner.run(create_then_fail)

    assert len(calls) == 1
    assert await runner.run(_count_users) == 0


async def test_store_outage_is_retried_then_succeeds(runner):
    calls = []

    async def flaky(session):
        calls.append(1)
        if len(calls) < 3:
            raise _locked()
        await create_user(session, email="a@example.com", password_hash="x")
        return "ok"

    assert await runner.run(flaky) == "ok"
    assert len(calls) == 3
    assert await runner.run(_count_users) == 1


async def test_store_outage_exhausts_retries(session_factory):
    runner = TransactionRunner(session_factory, RetryPolicy(attempts=2, min_wait_seconds=0.01, max_wait_seconds=0.01))
    calls = []

    async def always_down(session):
        calls.append(1)
        raise _locked()

    with pytest.raises(StoreUnavailableError):
        await runner.run(always_down)

    assert len(calls) == 2
