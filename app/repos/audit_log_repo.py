"""
Audit log repository for admission and referral state changes
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc

from app.models.audit_log import AuditLog


async def create_audit_log(
    session: AsyncSession,
    actor_id: Optional[UUID],
    action: str,
    resource_type: str,
    resource_id: UUID,
    details: Optional[dict] = None
) -> AuditLog:
    """
    Create an audit log entry inside the caller's transaction.

    Args:
        session: Database session
        actor_id: User ID who performed the action (None for public actions)
        action: Action performed
        resource_type: Type of resource affected
        resource_id: ID of resource affected
        details: Additional details as JSON

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor_id=actor_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        details=details or {}
    )
    session.add(audit_log)
    await session.flush()
    return audit_log


async def get_audit_logs(
    session: AsyncSession,
    limit: int = 50,
    offset: int = 0,
    action: Optional[str] = None,
    resource_id: Optional[UUID] = None
) -> List[AuditLog]:
    """
    Get audit logs.

    Args:
        session: Database session
        limit: Maximum number of logs to return
        offset: Number of logs to skip
        action: Filter by action type
        resource_id: Filter by affected resource

    Returns:
        List of AuditLog instances
    """
    query = select(AuditLog).order_by(desc(AuditLog.created_at))

    if action:
        query = query.where(AuditLog.action == action)

    if resource_id:
        query = query.where(AuditLog.resource_id == resource_id)

    query = query.limit(limit).offset(offset)

    result = await session.execute(query)
    return list(result.scalars().all())
