"""
Invitation repository with async CRUD operations
"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from app.models.invitation import Invitation


async def create_invitation(
    session: AsyncSession,
    application_id: UUID,
    token: str,
    expires_at: datetime
) -> Invitation:
    """
    Create an unused invitation for an application.

    Args:
        session: Database session
        application_id: Approved application UUID
        token: Opaque token string
        expires_at: Expiration datetime

    Returns:
        Created Invitation instance
    """
    invitation = Invitation(
        application_id=application_id,
        token=token,
        expires_at=expires_at,
        is_used=False
    )
    session.add(invitation)
    await session.flush()
    return invitation


async def get_invitation_by_token(session: AsyncSession, token: str) -> Optional[Invitation]:
    """
    Get invitation by token string.

    Args:
        session: Database session
        token: Token string

    Returns:
        Invitation instance or None if not found
    """
    result = await session.execute(
        select(Invitation).where(Invitation.token == token)
    )
    return result.scalar_one_or_none()


async def get_invitation_for_application(session: AsyncSession, application_id: UUID) -> Optional[Invitation]:
    """
    Get the invitation spawned by an application.

    Args:
        session: Database session
        application_id: Application UUID

    Returns:
        Invitation instance or None if the application was never approved
    """
    result = await session.execute(
        select(Invitation).where(Invitation.application_id == application_id)
    )
    return result.scalar_one_or_none()


async def mark_used_if_unused(session: AsyncSession, invitation_id: UUID, used_at: datetime) -> bool:
    """
    Compare-and-set is_used from False to True.

    The WHERE clause re-checks is_used inside the caller's transaction, so
    of two concurrent callers exactly one sees a row updated.

    Args:
        session: Database session
        invitation_id: Invitation UUID
        used_at: Redemption time

    Returns:
        True if this call flipped the flag, False if it was already set
    """
    result = await session.execute(
        update(Invitation)
        .where(Invitation.id == invitation_id, Invitation.is_used.is_(False))
        .values(is_used=True, used_at=used_at)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
