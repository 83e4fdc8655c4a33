"""
Concurrent redemptions and decisions

Each contender runs on its own connection to the same SQLite file, so they
race on the compare-and-set updates exactly like two API workers would.
"""

import asyncio

import pytest

from app.models.application import Application
from app.models.enums import ApplicationStatus, NotificationKind
from app.repos.application_repo import get_application_by_id
from app.repos.invitation_repo import get_invitation_by_token, get_invitation_for_application
from app.repos.member_repo import get_member_by_id
from app.services.exceptions import AlreadyDecided, EmailAlreadyRegistered, InvalidToken
from app.services.members import MemberProfile
from app.services.transactions import RetryPolicy

from tests.fixtures.admission import DEFAULT_PHONE

pytestmark = pytest.mark.integration


@pytest.fixture
def retry_policy() -> RetryPolicy:
    # the loser may see "database is locked" while the winner commits
    return RetryPolicy(attempts=10, min_wait_seconds=0.05, max_wait_seconds=0.5)


@pytest.mark.parametrize("contenders", [2, 5])
async def test_only_one_concurrent_registration_wins(admission_service, notifier, admin_user, session_factory, contenders):
    application = await admission_service.submit_application(name="Ana", email="ana@x.com")
    await admission_service.approve(application.id, admin_user.id)
    token = notifier.last_token_for("ana@x.com")

    results = await asyncio.gather(
        *[
            admission_service.register(token, full_name=f"Ana {i}", phone=DEFAULT_PHONE, password="long-enough")
            for i in range(contenders)
        ],
        return_exceptions=True,
    )

    winners = [r for r in results if isinstance(r, MemberProfile)]
    losers = [r for r in results if isinstance(r, InvalidToken)]
    assert len(winners) == 1
    assert len(losers) == contenders - 1

    async with session_factory() as session:
        invitation = await get_invitation_by_token(session, token)
        member = await get_member_by_id(session, winners[0].id)
    assert invitation.is_used is True
    assert member.invitation_id == invitation.id


async def test_concurrent_approvals_issue_one_invitation(admission_service, notifier, admin_user):
    application = await admission_service.submit_application(name="Bo", email="bo@example.com")

    results = await asyncio.gather(
        admission_service.approve(application.id, admin_user.id),
        admission_service.approve(application.id, admin_user.id),
        return_exceptions=True,
    )

    winners = [r for r in results if isinstance(r, Application)]
    losers = [r for r in results if isinstance(r, AlreadyDecided)]
    assert len(winners) == 1
    assert len(losers) == 1
    assert winners[0].status == ApplicationStatus.APPROVED
    assert len(notifier.of_kind(NotificationKind.INVITATION_CREATED)) == 1


async def test_concurrent_approve_and_reject_decide_once(admission_service, notifier, admin_user, session_factory):
    application = await admission_service.submit_application(name="Cy", email="cy@example.com")

    results = await asyncio.gather(
        admission_service.approve(application.id, admin_user.id),
        admission_service.reject(application.id, admin_user.id),
        return_exceptions=True,
    )

    winners = [r for r in results if isinstance(r, Application)]
    assert len(winners) == 1
    assert [type(r) for r in results if not isinstance(r, Application)] == [AlreadyDecided]

    async with session_factory() as session:
        stored = await get_application_by_id(session, application.id)
        invitation = await get_invitation_for_application(session, application.id)
    assert stored.status == winners[0].status
    assert (invitation is not None) == (stored.status == ApplicationStatus.APPROVED)


async def test_same_email_on_two_invitations_registers_once(admission_service, notifier, admin_user):
    first = await admission_service.submit_application(name="Dee", email="dee@example.com")
    second = await admission_service.submit_application(name="Dee", email="dee@example.com")
    await admission_service.approve(first.id, admin_user.id)
    first_token = notifier.last_token_for("dee@example.com")
    await admission_service.approve(second.id, admin_user.id)
    second_token = notifier.last_token_for("dee@example.com")

    results = await asyncio.gather(
        admission_service.register(first_token, full_name="Dee", phone=DEFAULT_PHONE, password="long-enough"),
        admission_service.register(second_token, full_name="Dee", phone=DEFAULT_PHONE, password="long-enough"),
        return_exceptions=True,
    )

    assert len([r for r in results if isinstance(r, MemberProfile)]) == 1
    assert [type(r) for r in results if not isinstance(r, MemberProfile)] == [EmailAlreadyRegistered]
