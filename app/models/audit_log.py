"""
Audit log model for admission and referral state changes
"""

from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from app.core.clock import utcnow
from app.db.base import Base
import uuid


class AuditLog(Base):
    """Audit log model - append-only"""
    __tablename__ = "audit_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    actor_id = Column(UUID(as_uuid=True), nullable=True)  # admin user id or member id; NULL for public actions
    action = Column(String(128), nullable=False, index=True)
    resource_type = Column(String(64), nullable=False)
    resource_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    def __repr__(self):
        return f"<AuditLog(id={self.id}, actor_id={self.actor_id}, action={self.action})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "actor_id": str(self.actor_id) if self.actor_id else None,
            "action": self.action,
            "resource_type": self.resource_type,
            "resource_id": str(self.resource_id),
            "details": self.details,
            "created_at": self.created_at.isoformat() if self.created_at else None
        }
