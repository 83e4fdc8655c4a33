"""
Invitation model - single-use, time-boxed registration token
"""

from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from app.core.clock import utcnow, ensure_utc
from app.db.base import Base
import uuid


class Invitation(Base):
    """Invitation model - spawned by an application approval, never deleted"""
    __tablename__ = "invitations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    application_id = Column(
        UUID(as_uuid=True), ForeignKey("applications.id", ondelete="RESTRICT"), nullable=False, unique=True
    )
    token = Column(String(128), nullable=False, unique=True)
    is_used = Column(Boolean, nullable=False, default=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    def __repr__(self):
        # token deliberately left out of the repr
        return f"<Invitation(id={self.id}, application_id={self.application_id}, is_used={self.is_used})>"

    def is_expired(self, now) -> bool:
        return now > ensure_utc(self.expires_at)

    def is_redeemable(self, now) -> bool:
        return not self.is_used and not self.is_expired(now)
