"""
Application repository with async CRUD operations

Functions flush but never commit; the calling service owns the transaction.
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, desc
from app.models.application import Application
from app.models.enums import ApplicationStatus


async def create_application(
    session: AsyncSession,
    name: str,
    email: str,
    company: Optional[str] = None,
    reason: Optional[str] = None
) -> Application:
    """
    Create a new pending application.

    Args:
        session: Database session
        name: Applicant name
        email: Applicant email (already normalised)
        company: Applicant company (optional)
        reason: Why the applicant wants to join (optional)

    Returns:
        Created Application instance
    """
    application = Application(
        name=name,
        email=email,
        company=company,
        reason=reason,
        status=ApplicationStatus.PENDING
    )
    session.add(application)
    await session.flush()
    return application


async def get_application_by_id(session: AsyncSession, application_id: UUID) -> Optional[Application]:
    """
    Get application by ID.

    Args:
        session: Database session
        application_id: Application UUID

    Returns:
        Application instance or None if not found
    """
    result = await session.execute(
        select(Application).where(Application.id == application_id)
    )
    return result.scalar_one_or_none()


async def get_application_for_update(session: AsyncSession, application_id: UUID) -> Optional[Application]:
    """
    Get application by ID with a row-level lock held until the transaction ends.

    Args:
        session: Database session
        application_id: Application UUID

    Returns:
        Application instance or None if not found
    """
    result = await session.execute(
        select(Application)
        .where(Application.id == application_id)
        .with_for_update()
    )
    return result.scalar_one_or_none()


async def get_applications(
    session: AsyncSession,
    limit: int = 50,
    offset: int = 0,
    status: Optional[ApplicationStatus] = None
) -> List[Application]:
    """
    Get list of applications, newest first.

    Args:
        session: Database session
        limit: Maximum number of applications to return
        offset: Number of applications to skip
        status: Filter by application status

    Returns:
        List of Application instances
    """
    query = select(Application).order_by(desc(Application.created_at))

    if status is not None:
        query = query.where(Application.status == status)

    query = query.limit(limit).offset(offset)

    result = await session.execute(query)
    return list(result.scalars().all())


async def mark_decided(
    session: AsyncSession,
    application_id: UUID,
    status: ApplicationStatus,
    reviewer_id: UUID,
    reviewed_at: datetime
) -> bool:
    """
    Compare-and-set a pending application to its decided status.

    Args:
        session: Database session
        application_id: Application UUID
        status: APPROVED or REJECTED
        reviewer_id: Admin user ID
        reviewed_at: Decision time

    Returns:
        True if this call decided the application, False if it was no longer pending
    """
    result = await session.execute(
        update(Application)
        .where(Application.id == application_id, Application.status == ApplicationStatus.PENDING)
        .values(status=status, reviewer_id=reviewer_id, reviewed_at=reviewed_at)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
