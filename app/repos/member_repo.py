"""
Member repository with async CRUD operations
"""

from typing import Optional, Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.models.member import Member
from app.models.user import User


async def create_member(
    session: AsyncSession,
    user_id: UUID,
    invitation_id: UUID,
    full_name: str,
    phone: str
) -> Member:
    """
    Create an active member linked to a user and the invitation it consumed.

    Args:
        session: Database session
        user_id: User UUID
        invitation_id: Redeemed invitation UUID
        full_name: Member full name
        phone: Member phone number

    Returns:
        Created Member instance
    """
    member = Member(
        user_id=user_id,
        invitation_id=invitation_id,
        full_name=full_name,
        phone=phone,
        active=True
    )
    session.add(member)
    await session.flush()
    return member


async def get_member_by_id(session: AsyncSession, member_id: UUID) -> Optional[Member]:
    """
    Get member by ID.

    Args:
        session: Database session
        member_id: Member UUID

    Returns:
        Member instance or None if not found
    """
    result = await session.execute(
        select(Member).where(Member.id == member_id)
    )
    return result.scalar_one_or_none()


async def get_member_by_user_id(session: AsyncSession, user_id: UUID) -> Optional[Member]:
    """
    Get member by user ID.

    Args:
        session: Database session
        user_id: User UUID

    Returns:
        Member instance or None if the user is not a member
    """
    result = await session.execute(
        select(Member).where(Member.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_member_with_email(session: AsyncSession, member_id: UUID) -> Optional[Tuple[Member, str]]:
    """
    Get member together with the email of its user.

    Args:
        session: Database session
        member_id: Member UUID

    Returns:
        (Member, email) tuple or None if not found
    """
    result = await session.execute(
        select(Member, User.email)
        .join(User, User.id == Member.user_id)
        .where(Member.id == member_id)
    )
    row = result.one_or_none()
    if row is None:
        return None
    return row[0], row[1]


async def set_member_active(session: AsyncSession, member_id: UUID, active: bool) -> Optional[Member]:
    """
    Activate or deactivate a member.

    Args:
        session: Database session
        member_id: Member UUID
        active: New active flag

    Returns:
        Updated Member instance or None if not found
    """
    result = await session.execute(
        select(Member).where(Member.id == member_id).with_for_update()
    )
    member = result.scalar_one_or_none()
    if not member:
        return None

    member.active = active
    await session.flush()
    return member
