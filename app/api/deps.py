"""
FastAPI dependencies that build the service layer
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.config import settings
from app.db.session import get_session_factory
from app.services.admission import AdmissionPolicy, AdmissionService
from app.services.members import MemberDirectory
from app.services.notifications import CeleryNotificationSender, NotificationSender
from app.services.referrals import ReferralService
from app.services.transactions import RetryPolicy, TransactionRunner


def get_notification_sender() -> NotificationSender:
    return CeleryNotificationSender()


def get_admission_policy() -> AdmissionPolicy:
    return AdmissionPolicy.from_settings(settings)


def get_retry_policy() -> RetryPolicy:
    return RetryPolicy.from_settings(settings)


def get_transaction_runner(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    retry_policy: RetryPolicy = Depends(get_retry_policy)
) -> TransactionRunner:
    return TransactionRunner(session_factory, retry_policy)


def get_admission_service(
    runner: TransactionRunner = Depends(get_transaction_runner),
    policy: AdmissionPolicy = Depends(get_admission_policy),
    notifier: NotificationSender = Depends(get_notification_sender)
) -> AdmissionService:
    return AdmissionService(runner, policy, notifier)


def get_referral_service(runner: TransactionRunner = Depends(get_transaction_runner)) -> ReferralService:
    return ReferralService(runner)


def get_member_directory(runner: TransactionRunner = Depends(get_transaction_runner)) -> MemberDirectory:
    return MemberDirectory(runner)
