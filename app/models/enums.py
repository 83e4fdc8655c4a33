"""
Database enums for admission and referral state
"""

import enum


class ApplicationStatus(enum.Enum):
    """Application review status"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewDecision(enum.Enum):
    """Admin decision on a pending application"""
    APPROVE = "approve"
    REJECT = "reject"


class UserRole(enum.Enum):
    """User role"""
    MEMBER = "member"
    ADMIN = "admin"


class ReferralStatus(enum.Enum):
    """Referral lifecycle status"""
    SENT = "sent"
    NEGOTIATING = "negotiating"
    CLOSED = "closed"
    REJECTED = "rejected"


class NotificationKind(enum.Enum):
    """Outbound notification templates"""
    APPLICATION_RECEIVED = "application_received"
    INVITATION_CREATED = "invitation_created"
    APPLICATION_REJECTED = "application_rejected"
