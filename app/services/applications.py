"""
Application Registry

Owns Application records and the pending -> approved | rejected decision.
Functions here run inside a transaction opened by the caller.
"""

import logging
from datetime import datetime
from typing import Optional, NamedTuple
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.application import Application
from app.models.enums import ApplicationStatus, ReviewDecision
from app.repos.application_repo import (
    create_application,
    get_application_for_update,
    mark_decided,
)
from app.services.exceptions import AlreadyDecided, NotFound, ValidationError

logger = logging.getLogger(__name__)

DECISION_STATUS = {
    ReviewDecision.APPROVE: ApplicationStatus.APPROVED,
    ReviewDecision.REJECT: ApplicationStatus.REJECTED,
}


class ApplicationInput(NamedTuple):
    name: str
    email: str
    company: Optional[str]
    reason: Optional[str]


def normalize_email(email: Optional[str]) -> str:
    """
    Validate email syntax and return it lower-cased.

    Raises:
        ValidationError: if the email is empty or malformed
    """
    if not email or not email.strip():
        raise ValidationError("Email is required")
    try:
        result = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}") from e
    return result.normalized.lower()


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def validate_application_input(
    name: Optional[str],
    email: Optional[str],
    company: Optional[str] = None,
    reason: Optional[str] = None
) -> ApplicationInput:
    """Check and normalise application fields."""
    if not name or not name.strip():
        raise ValidationError("Name is required")
    return ApplicationInput(
        name=name.strip(),
        email=normalize_email(email),
        company=_optional_text(company),
        reason=_optional_text(reason),
    )


async def submit(session: AsyncSession, data: ApplicationInput) -> Application:
    """Create a pending application. The same email may apply more than once."""
    application = await create_application(
        session,
        name=data.name,
        email=data.email,
        company=data.company,
        reason=data.reason,
    )
    logger.info(f"Application {application.id} submitted")
    return application


async def decide(
    session: AsyncSession,
    application_id: UUID,
    reviewer_id: UUID,
    decision: ReviewDecision,
    now: datetime
) -> Application:
    """
    Move a pending application to approved or rejected.

    Raises:
        NotFound: application does not exist
        AlreadyDecided: application is no longer pending
    """
    application = await get_application_for_update(session, application_id)
    if application is None:
        raise NotFound(f"Application {application_id} not found")

    if application.status != ApplicationStatus.PENDING:
        raise AlreadyDecided(
            f"Application {application_id} is already {application.status.value}"
        )

    decided = await mark_decided(
        session,
        application_id,
        status=DECISION_STATUS[decision],
        reviewer_id=reviewer_id,
        reviewed_at=now,
    )
    await session.refresh(application)
    if not decided:
        # a concurrent decision committed after our read
        raise AlreadyDecided(
            f"Application {application_id} is already {application.status.value}"
        )
    return application
