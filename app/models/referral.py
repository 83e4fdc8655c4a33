"""
Referral model - a business lead passed from one member to another
"""

from sqlalchemy import Column, String, Text, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from app.core.clock import utcnow
from app.db.base import Base
from app.models.enums import ReferralStatus
import uuid


class Referral(Base):
    """Referral model - status moves through REFERRAL_TRANSITIONS only"""
    __tablename__ = "referrals"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    from_member_id = Column(UUID(as_uuid=True), ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)
    to_member_id = Column(UUID(as_uuid=True), ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)
    contact_name = Column(String(255), nullable=False)
    contact_company = Column(String(255), nullable=True)
    description = Column(Text, nullable=False)
    status = Column(Enum(ReferralStatus, name="referral_status"), nullable=False, default=ReferralStatus.SENT)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("from_member_id <> to_member_id", name="chk_referral_not_self"),
    )

    def __repr__(self):
        return f"<Referral(id={self.id}, from={self.from_member_id}, to={self.to_member_id}, status={self.status.value})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "from_member_id": str(self.from_member_id),
            "to_member_id": str(self.to_member_id),
            "contact_name": self.contact_name,
            "contact_company": self.contact_company,
            "description": self.description,
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
