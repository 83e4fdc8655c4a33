"""
Referral Registry

Referral status follows REFERRAL_TRANSITIONS, the single table of legal
(current, requested) pairs. Only the receiving member moves a referral. The
status is read under a row lock and written with a compare-and-set on the
status that was read, so concurrent moves from one status cannot both land.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.metrics import REFERRALS_CREATED, REFERRAL_TRANSITIONS as TRANSITION_COUNT
from app.models.enums import ReferralStatus
from app.models.referral import Referral
from app.repos.audit_log_repo import create_audit_log
from app.repos.referral_repo import (
    create_referral,
    get_referral_for_update,
    get_referrals_for_member,
    set_referral_status,
)
from app.services.exceptions import (
    AlreadyTerminal,
    Forbidden,
    IllegalTransition,
    NotFound,
    SelfReferral,
    ValidationError,
)
from app.services.members import require_active_member
from app.services.transactions import TransactionRunner

logger = logging.getLogger(__name__)

S = ReferralStatus

# (current, requested) -> allowed. Pairs missing from the table are denied.
# SENT -> CLOSED is denied pending product clarification: a deal must go
# through negotiation first.
REFERRAL_TRANSITIONS: Dict[Tuple[ReferralStatus, ReferralStatus], bool] = {
    (S.SENT, S.NEGOTIATING): True,
    (S.SENT, S.REJECTED): True,
    (S.SENT, S.CLOSED): False,
    (S.NEGOTIATING, S.CLOSED): True,
    (S.NEGOTIATING, S.REJECTED): True,
}

TERMINAL_REFERRAL_STATUSES = frozenset({S.CLOSED, S.REJECTED})


def is_transition_allowed(current: ReferralStatus, requested: ReferralStatus) -> bool:
    return REFERRAL_TRANSITIONS.get((current, requested), False)


@dataclass(frozen=True)
class MemberReferrals:
    made: List[Referral]
    received: List[Referral]


class ReferralService:
    """Boundary operations for referrals"""

    def __init__(self, runner: TransactionRunner):
        self.runner = runner

    async def create(
        self,
        from_member_id: UUID,
        to_member_id: UUID,
        contact_name: str,
        contact_company: Optional[str],
        description: str
    ) -> Referral:
        """
        Send a referral from one active member to another.

        Raises:
            SelfReferral, NotFound, MemberInactive, ValidationError
        """
        if from_member_id == to_member_id:
            raise SelfReferral("A member cannot refer a lead to themselves")
        if not contact_name or not contact_name.strip():
            raise ValidationError("Contact name is required")
        if not description or not description.strip():
            raise ValidationError("Description is required")

        referral = await self.runner.run(
            self._create_tx,
            from_member_id,
            to_member_id,
            contact_name.strip(),
            contact_company.strip() if contact_company and contact_company.strip() else None,
            description.strip(),
        )
        REFERRALS_CREATED.inc()
        logger.info(f"Referral {referral.id} sent from {from_member_id} to {to_member_id}")
        return referral

    async def list_for_member(self, member_id: UUID) -> MemberReferrals:
        referrals = await self.runner.run(get_referrals_for_member, member_id)
        return MemberReferrals(
            made=[r for r in referrals if r.from_member_id == member_id],
            received=[r for r in referrals if r.to_member_id == member_id],
        )

    async def update_status(
        self,
        referral_id: UUID,
        actor_member_id: UUID,
        new_status: ReferralStatus
    ) -> Referral:
        """
        Move a referral along the transition table.

        Raises:
            NotFound, Forbidden, AlreadyTerminal, IllegalTransition
        """
        referral, previous = await self.runner.run(
            self._update_status_tx, referral_id, actor_member_id, new_status
        )
        TRANSITION_COUNT.labels(status=new_status.value).inc()
        logger.info(f"Referral {referral_id} moved {previous.value} -> {new_status.value}")
        return referral

    async def _create_tx(
        self,
        session: AsyncSession,
        from_member_id: UUID,
        to_member_id: UUID,
        contact_name: str,
        contact_company: Optional[str],
        description: str
    ) -> Referral:
        await require_active_member(session, from_member_id)
        await require_active_member(session, to_member_id)
        return await create_referral(
            session,
            from_member_id=from_member_id,
            to_member_id=to_member_id,
            contact_name=contact_name,
            contact_company=contact_company,
            description=description,
        )

    async def _update_status_tx(
        self,
        session: AsyncSession,
        referral_id: UUID,
        actor_member_id: UUID,
        new_status: ReferralStatus
    ) -> Tuple[Referral, ReferralStatus]:
        referral = await get_referral_for_update(session, referral_id)
        if referral is None:
            raise NotFound(f"Referral {referral_id} not found")

        if referral.to_member_id != actor_member_id:
            raise Forbidden("Only the receiving member can update a referral")

        current = referral.status
        if current in TERMINAL_REFERRAL_STATUSES:
            raise AlreadyTerminal(f"Referral {referral_id} is already {current.value}")

        if not is_transition_allowed(current, new_status):
            raise IllegalTransition(f"Cannot move referral from {current.value} to {new_status.value}")

        if not await set_referral_status(session, referral_id, current, new_status):
            # another update committed between our read and write
            await session.refresh(referral)
            if referral.status in TERMINAL_REFERRAL_STATUSES:
                raise AlreadyTerminal(f"Referral {referral_id} is already {referral.status.value}")
            raise IllegalTransition(
                f"Referral {referral_id} moved to {referral.status.value} before {new_status.value} could apply"
            )

        await session.refresh(referral)
        await create_audit_log(
            session,
            actor_id=actor_member_id,
            action="referral_status_changed",
            resource_type="referral",
            resource_id=referral.id,
            details={"from": current.value, "to": new_status.value},
        )
        return referral, current
