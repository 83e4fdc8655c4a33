# Models Package
from .user import User
from .application import Application
from .invitation import Invitation
from .member import Member
from .referral import Referral
from .audit_log import AuditLog

__all__ = [
    "User",
    "Application",
    "Invitation",
    "Member",
    "Referral",
    "AuditLog"
]
