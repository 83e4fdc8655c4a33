"""
Member Directory

Owns User and Member identity records. Admission creates members through
create_member_account; referrals consult require_active_member.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, NamedTuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import UserRole
from app.models.member import Member
from app.repos.audit_log_repo import create_audit_log
from app.repos.member_repo import create_member, get_member_by_id, get_member_with_email, set_member_active
from app.repos.user_repo import create_user, get_user_by_email
from app.services.exceptions import EmailAlreadyRegistered, MemberInactive, NotFound, ValidationError
from app.services.transactions import TransactionRunner

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^\+?[0-9][0-9 ().\-]{5,31}$")


@dataclass(frozen=True)
class MemberProfile:
    """Public projection of a member"""
    id: UUID
    email: str
    full_name: str
    active: bool = True


class RegistrationInput(NamedTuple):
    full_name: str
    phone: str
    password: str


def validate_registration_input(
    full_name: Optional[str],
    phone: Optional[str],
    password: Optional[str],
    password_min_length: int
) -> RegistrationInput:
    """Check registration fields against the password policy."""
    if not full_name or not full_name.strip():
        raise ValidationError("Full name is required")
    if not phone or not PHONE_PATTERN.match(phone.strip()):
        raise ValidationError("A valid phone number is required")
    if not password or len(password) < password_min_length:
        raise ValidationError(f"Password must be at least {password_min_length} characters")
    return RegistrationInput(full_name=full_name.strip(), phone=phone.strip(), password=password)


async def create_member_account(
    session: AsyncSession,
    email: str,
    password_hash: str,
    invitation_id: UUID,
    full_name: str,
    phone: str
) -> Member:
    """
    Create the User and Member pair for a redeemed invitation.

    Raises:
        EmailAlreadyRegistered: a user with this email already exists
    """
    if await get_user_by_email(session, email) is not None:
        raise EmailAlreadyRegistered("An account with this email already exists")

    user = await create_user(session, email=email, password_hash=password_hash, role=UserRole.MEMBER)
    return await create_member(
        session,
        user_id=user.id,
        invitation_id=invitation_id,
        full_name=full_name,
        phone=phone,
    )


async def require_active_member(session: AsyncSession, member_id: UUID) -> Member:
    """
    Load a member and insist it is active.

    Raises:
        NotFound: no such member
        MemberInactive: member exists but is deactivated
    """
    member = await get_member_by_id(session, member_id)
    if member is None:
        raise NotFound(f"Member {member_id} not found")
    if not member.active:
        raise MemberInactive(f"Member {member_id} is not active")
    return member


class MemberDirectory:
    """Read and admin operations on members"""

    def __init__(self, runner: TransactionRunner):
        self.runner = runner

    async def get_profile(self, member_id: UUID) -> MemberProfile:
        return await self.runner.run(self._get_profile, member_id)

    async def set_active(self, member_id: UUID, active: bool, actor_id: UUID) -> MemberProfile:
        """Activate or deactivate a member (admin operation)."""
        return await self.runner.run(self._set_active, member_id, active, actor_id)

    async def _get_profile(self, session: AsyncSession, member_id: UUID) -> MemberProfile:
        row = await get_member_with_email(session, member_id)
        if row is None:
            raise NotFound(f"Member {member_id} not found")
        member, email = row
        return MemberProfile(id=member.id, email=email, full_name=member.full_name, active=member.active)

    async def _set_active(self, session: AsyncSession, member_id: UUID, active: bool, actor_id: UUID) -> MemberProfile:
        member = await set_member_active(session, member_id, active)
        if member is None:
            raise NotFound(f"Member {member_id} not found")

        await create_audit_log(
            session,
            actor_id=actor_id,
            action="member_activated" if active else "member_deactivated",
            resource_type="member",
            resource_id=member.id,
        )
        logger.info(f"Member {member_id} active={active} set by {actor_id}")
        return await self._get_profile(session, member_id)
