"""
Referral repository with async CRUD operations
"""

from typing import Optional, List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, desc, or_
from app.core.clock import utcnow
from app.models.referral import Referral
from app.models.enums import ReferralStatus


async def create_referral(
    session: AsyncSession,
    from_member_id: UUID,
    to_member_id: UUID,
    contact_name: str,
    contact_company: Optional[str],
    description: str
) -> Referral:
    """
    Create a referral in the SENT status.

    Args:
        session: Database session
        from_member_id: Sending member UUID
        to_member_id: Receiving member UUID
        contact_name: Name of the lead
        contact_company: Company of the lead (optional)
        description: What the lead needs

    Returns:
        Created Referral instance
    """
    referral = Referral(
        from_member_id=from_member_id,
        to_member_id=to_member_id,
        contact_name=contact_name,
        contact_company=contact_company,
        description=description,
        status=ReferralStatus.SENT
    )
    session.add(referral)
    await session.flush()
    return referral


async def get_referral_for_update(session: AsyncSession, referral_id: UUID) -> Optional[Referral]:
    """
    Get referral by ID with a row-level lock held until the transaction ends.

    Args:
        session: Database session
        referral_id: Referral UUID

    Returns:
        Referral instance or None if not found
    """
    result = await session.execute(
        select(Referral)
        .where(Referral.id == referral_id)
        .with_for_update()
    )
    return result.scalar_one_or_none()


async def get_referrals_for_member(session: AsyncSession, member_id: UUID) -> List[Referral]:
    """
    Get every referral a member sent or received, newest first.

    Args:
        session: Database session
        member_id: Member UUID

    Returns:
        List of Referral instances
    """
    result = await session.execute(
        select(Referral)
        .where(or_(Referral.from_member_id == member_id, Referral.to_member_id == member_id))
        .order_by(desc(Referral.created_at))
    )
    return list(result.scalars().all())


async def set_referral_status(
    session: AsyncSession,
    referral_id: UUID,
    current: ReferralStatus,
    status: ReferralStatus
) -> bool:
    """
    Compare-and-set the status of a referral.

    The WHERE clause re-checks the status the caller validated, so of two
    concurrent writers starting from the same status exactly one succeeds.

    Args:
        session: Database session
        referral_id: Referral UUID
        current: Status the caller read
        status: New status

    Returns:
        True if this call moved the referral, False if its status had changed
    """
    result = await session.execute(
        update(Referral)
        .where(Referral.id == referral_id, Referral.status == current)
        .values(status=status, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
