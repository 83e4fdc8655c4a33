"""
Test configuration and fixtures for BizCircle

Every test gets its own file-backed SQLite database under tmp_path. Each
service operation opens its own connection, so concurrent operations behave
like separate clients of a real database.

Usage:
    pytest tests/
"""

import os

os.environ.setdefault("APP_ENV", "testing")

from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.api.deps import get_admission_policy, get_notification_sender, get_retry_policy
from app.db.base import Base
from app.db.session import get_db, get_session_factory
from app.main import app
from app.models.enums import UserRole
from app.models.user import User
from app.services.admission import AdmissionPolicy, AdmissionService
from app.services.members import MemberDirectory
from app.services.referrals import ReferralService
from app.services.transactions import RetryPolicy, TransactionRunner

from tests.fixtures.admission import FakeClock, RecordingNotifier, bearer, create_test_user

TEST_RETRY_POLICY = RetryPolicy(attempts=3, min_wait_seconds=0.01, max_wait_seconds=0.05)


@pytest.fixture
async def db_engine(tmp_path):
    """
    Create a database engine on a fresh SQLite file with all tables.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'bizcircle.db'}",
        echo=False,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def retry_policy() -> RetryPolicy:
    return TEST_RETRY_POLICY


@pytest.fixture
def runner(session_factory, retry_policy) -> TransactionRunner:
    return TransactionRunner(session_factory, retry_policy)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def policy(clock) -> AdmissionPolicy:
    return AdmissionPolicy(clock=clock, notification_timeout=0.5, notify_in_background=False)


@pytest.fixture
def admission_service(runner, policy, notifier) -> AdmissionService:
    return AdmissionService(runner, policy, notifier)


@pytest.fixture
def referral_service(runner) -> ReferralService:
    return ReferralService(runner)


@pytest.fixture
def member_directory(runner) -> MemberDirectory:
    return MemberDirectory(runner)


@pytest.fixture
async def admin_user(session_factory) -> User:
    return await create_test_user(session_factory, "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user.id)


@pytest.fixture
async def test_app(session_factory, notifier, policy, retry_policy) -> AsyncGenerator[FastAPI, None]:
    """
    FastAPI app wired to the per-test database and recording notifier.
    """
    async def get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_notification_sender] = lambda: notifier
    app.dependency_overrides[get_admission_policy] = lambda: policy
    app.dependency_overrides[get_retry_policy] = lambda: retry_policy

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def test_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client
