"""
Invitation Registry

Invitations are spawned by an approval and consumed by exactly one
registration. Validity is re-evaluated on every read; nothing flips when an
invitation expires.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.tokens import generate_token
from app.models.application import Application
from app.models.invitation import Invitation
from app.repos.application_repo import get_application_by_id
from app.repos.invitation_repo import create_invitation, get_invitation_by_token


async def issue(
    session: AsyncSession,
    application: Application,
    now: datetime,
    ttl: timedelta,
    token_factory: Callable[[], str] = generate_token
) -> Invitation:
    """Create the single invitation of a freshly approved application."""
    return await create_invitation(
        session,
        application_id=application.id,
        token=token_factory(),
        expires_at=now + ttl,
    )


async def check_invitation(
    session: AsyncSession,
    token: Optional[str],
    now: datetime
) -> Tuple[bool, Optional[Invitation], Optional[Application]]:
    """
    The one validity check shared by lookup and registration.

    Returns:
        (True, invitation, application) when the token is unused and unexpired,
        (False, None, None) for every other case
    """
    if not token:
        return False, None, None

    invitation = await get_invitation_by_token(session, token)
    if invitation is None or not invitation.is_redeemable(now):
        return False, None, None

    application = await get_application_by_id(session, invitation.application_id)
    if application is None:
        return False, None, None

    return True, invitation, application
