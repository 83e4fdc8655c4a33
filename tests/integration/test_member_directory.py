"""
Integration tests for member profiles and activation
"""

from uuid import uuid4

import pytest

from app.repos.audit_log_repo import get_audit_logs
from app.services.exceptions import NotFound

from tests.fixtures.admission import admit_member

pytestmark = pytest.mark.integration


async def test_get_profile(member_directory, admission_service, notifier, admin_user):
    ana = await admit_member(admission_service, notifier, admin_user.id, "Ana", "ana@example.com")

    profile = await member_directory.get_profile(ana.id)

    assert profile == ana


async def test_get_unknown_profile(member_directory):
    with pytest.raises(NotFound):
        await member_directory.get_profile(uuid4())


async def test_deactivate_and_reactivate(member_directory, admission_service, notifier, admin_user, session_factory):
    ana = await admit_member(admission_service, notifier, admin_user.id, "Ana", "ana@example.com")

    deactivated = await member_directory.set_active(ana.id, False, actor_id=admin_user.id)
    assert deactivated.active is False
    assert (await member_directory.get_profile(ana.id)).active is False

    reactivated = await member_directory.set_active(ana.id, True, actor_id=admin_user.id)
    assert reactivated.active is True

    async with session_factory() as session:
        off = await get_audit_logs(session, action="member_deactivated", resource_id=ana.id)
        on = await get_audit_logs(session, action="member_activated", resource_id=ana.id)
    assert len(off) == 1 and len(on) == 1
    assert off[0].actor_id == admin_user.id


async def test_set_active_unknown_member(member_directory, admin_user):
    with pytest.raises(NotFound):
        await member_directory.set_active(uuid4(), False, actor_id=admin_user.id)
