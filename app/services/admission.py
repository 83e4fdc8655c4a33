"""
Admission Orchestrator

Composes the application, invitation and member registries:

    submit -> pending
    approve -> approved + invitation (one transaction) -> invitation_created mail
    reject  -> rejected -> application_rejected mail
    lookup_invitation(token) -> InvitationLookup (pure read)
    register(token, ...) -> MemberProfile (compare-and-set on is_used)

Configuration is injected through AdmissionPolicy so TTL, password policy
and the clock can be varied per instance.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_password_hash
from app.core.clock import utcnow
from app.core.config import Settings
from app.core.metrics import (
    APPLICATIONS_DECIDED,
    APPLICATIONS_SUBMITTED,
    MEMBERS_REGISTERED,
    REDEMPTIONS_FAILED,
)
from app.core.tokens import generate_token
from app.models.application import Application
from app.models.enums import ApplicationStatus, NotificationKind, ReviewDecision
from app.models.invitation import Invitation
from app.repos.application_repo import get_applications
from app.repos.audit_log_repo import create_audit_log
from app.repos.invitation_repo import mark_used_if_unused
from app.services import applications, invitations
from app.services.exceptions import AlreadyDecided, EmailAlreadyRegistered, InvalidToken
from app.services.members import (
    MemberProfile,
    RegistrationInput,
    create_member_account,
    validate_registration_input,
)
from app.services.notifications import NotificationSender, emit, schedule_emit
from app.services.transactions import TransactionRunner, is_unique_violation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdmissionPolicy:
    """Admission configuration injected into AdmissionService"""
    invitation_ttl: timedelta = timedelta(days=7)
    password_min_length: int = 8
    notification_timeout: float = 5.0
    notify_in_background: bool = True
    hash_password: Callable[[str], str] = field(default=get_password_hash)
    clock: Callable[[], datetime] = field(default=utcnow)
    token_factory: Callable[[], str] = field(default=generate_token)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AdmissionPolicy":
        return cls(
            invitation_ttl=timedelta(days=settings.invitation_ttl_days),
            password_min_length=settings.password_min_length,
            notification_timeout=settings.notification_timeout_seconds,
            notify_in_background=settings.notifications_in_background,
        )


@dataclass(frozen=True)
class InvitationLookup:
    """Constant-shape answer to a token lookup"""
    valid: bool
    email: Optional[str] = None


class AdmissionService:
    """Boundary operations for applications, invitations and registration"""

    def __init__(self, runner: TransactionRunner, policy: AdmissionPolicy, notifier: NotificationSender):
        self.runner = runner
        self.policy = policy
        self.notifier = notifier

    # Applications

    async def submit_application(
        self,
        name: str,
        email: str,
        company: Optional[str] = None,
        reason: Optional[str] = None
    ) -> Application:
        data = applications.validate_application_input(name, email, company, reason)
        application = await self.runner.run(applications.submit, data)
        APPLICATIONS_SUBMITTED.inc()

        await self._notify(
            application.email,
            NotificationKind.APPLICATION_RECEIVED,
            {"name": application.name, "application_id": str(application.id)},
        )
        return application

    async def list_applications(
        self,
        status: Optional[ApplicationStatus] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[Application]:
        return await self.runner.run(get_applications, limit=limit, offset=offset, status=status)

    async def list_pending(self, limit: int = 50, offset: int = 0) -> List[Application]:
        return await self.list_applications(ApplicationStatus.PENDING, limit=limit, offset=offset)

    async def decide_application(
        self,
        application_id: UUID,
        reviewer_id: UUID,
        decision: ReviewDecision
    ) -> Application:
        if decision == ReviewDecision.APPROVE:
            return await self.approve(application_id, reviewer_id)
        return await self.reject(application_id, reviewer_id)

    async def approve(self, application_id: UUID, reviewer_id: UUID) -> Application:
        """
        Approve a pending application and issue its invitation atomically.

        Raises:
            NotFound, AlreadyDecided
        """
        application, invitation = await self.runner.run(self._approve_tx, application_id, reviewer_id)
        APPLICATIONS_DECIDED.labels(decision=ReviewDecision.APPROVE.value).inc()
        logger.info(f"Application {application_id} approved by {reviewer_id}; invitation {invitation.id} issued")

        await self._notify(
            application.email,
            NotificationKind.INVITATION_CREATED,
            {
                "name": application.name,
                "token": invitation.token,
                "expires_at": invitation.expires_at.isoformat(),
            },
        )
        return application

    async def reject(self, application_id: UUID, reviewer_id: UUID) -> Application:
        """
        Reject a pending application.

        Raises:
            NotFound, AlreadyDecided
        """
        application = await self.runner.run(self._reject_tx, application_id, reviewer_id)
        APPLICATIONS_DECIDED.labels(decision=ReviewDecision.REJECT.value).inc()
        logger.info(f"Application {application_id} rejected by {reviewer_id}")

        await self._notify(
            application.email,
            NotificationKind.APPLICATION_REJECTED,
            {"name": application.name},
        )
        return application

    # Invitations

    async def lookup_invitation(self, token: str) -> InvitationLookup:
        """Report whether a token can still be redeemed. Never mutates state."""
        return await self.runner.run(self._lookup_tx, token)

    async def register(
        self,
        token: str,
        full_name: str,
        phone: str,
        password: str
    ) -> MemberProfile:
        """
        Redeem an invitation token into a new member.

        Raises:
            InvalidToken: unknown, expired or already-used token, or lost race
            ValidationError: bad registration input or email already registered
        """
        lookup = await self.lookup_invitation(token)
        if not lookup.valid:
            REDEMPTIONS_FAILED.inc()
            raise InvalidToken()

        data = validate_registration_input(full_name, phone, password, self.policy.password_min_length)
        password_hash = await asyncio.to_thread(self.policy.hash_password, data.password)

        try:
            profile = await self.runner.run(self._redeem_tx, token, data, password_hash)
        except InvalidToken:
            REDEMPTIONS_FAILED.inc()
            raise

        MEMBERS_REGISTERED.inc()
        logger.info(f"Member {profile.id} registered")
        return profile

    # Transactions

    async def _approve_tx(
        self,
        session: AsyncSession,
        application_id: UUID,
        reviewer_id: UUID
    ) -> Tuple[Application, Invitation]:
        now = self.policy.clock()
        application = await applications.decide(
            session, application_id, reviewer_id, ReviewDecision.APPROVE, now
        )
        try:
            invitation = await invitations.issue(
                session,
                application,
                now=now,
                ttl=self.policy.invitation_ttl,
                token_factory=self.policy.token_factory,
            )
        except IntegrityError as e:
            if is_unique_violation(e, "invitations", "application_id"):
                raise AlreadyDecided(f"Application {application_id} already has an invitation") from e
            raise
        await create_audit_log(
            session,
            actor_id=reviewer_id,
            action="application_approved",
            resource_type="application",
            resource_id=application.id,
            details={"invitation_id": str(invitation.id), "expires_at": invitation.expires_at.isoformat()},
        )
        return application, invitation

    async def _reject_tx(self, session: AsyncSession, application_id: UUID, reviewer_id: UUID) -> Application:
        application = await applications.decide(
            session, application_id, reviewer_id, ReviewDecision.REJECT, self.policy.clock()
        )
        await create_audit_log(
            session,
            actor_id=reviewer_id,
            action="application_rejected",
            resource_type="application",
            resource_id=application.id,
        )
        return application

    async def _lookup_tx(self, session: AsyncSession, token: str) -> InvitationLookup:
        valid, _, application = await invitations.check_invitation(session, token, self.policy.clock())
        if not valid:
            return InvitationLookup(valid=False)
        return InvitationLookup(valid=True, email=application.email)

    async def _redeem_tx(
        self,
        session: AsyncSession,
        token: str,
        data: RegistrationInput,
        password_hash: str
    ) -> MemberProfile:
        now = self.policy.clock()
        valid, invitation, application = await invitations.check_invitation(session, token, now)
        if not valid:
            raise InvalidToken()

        if not await mark_used_if_unused(session, invitation.id, now):
            raise InvalidToken()

        try:
            member = await create_member_account(
                session,
                email=application.email,
                password_hash=password_hash,
                invitation_id=invitation.id,
                full_name=data.full_name,
                phone=data.phone,
            )
        except IntegrityError as e:
            if is_unique_violation(e, "users", "email"):
                # a different invitation for the same email registered first
                raise EmailAlreadyRegistered("An account with this email already exists") from e
            # a concurrent redemption of this invitation committed first
            raise InvalidToken() from e

        await create_audit_log(
            session,
            actor_id=member.id,
            action="invitation_redeemed",
            resource_type="invitation",
            resource_id=invitation.id,
            details={"member_id": str(member.id)},
        )
        return MemberProfile(id=member.id, email=application.email, full_name=member.full_name)

    async def _notify(self, destination_email: str, kind: NotificationKind, payload: dict) -> None:
        if self.policy.notify_in_background:
            schedule_emit(
                self.notifier, destination_email, kind, payload, timeout=self.policy.notification_timeout
            )
            return
        await emit(
            self.notifier, destination_email, kind, payload, timeout=self.policy.notification_timeout
        )
