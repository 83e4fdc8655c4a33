"""
Admission-specific test doubles and helpers
"""

import asyncio
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.auth import create_access_token, get_password_hash
from app.models.enums import NotificationKind, UserRole
from app.models.user import User
from app.repos.member_repo import get_member_by_id
from app.repos.user_repo import create_user
from app.services.admission import AdmissionService
from app.services.members import MemberProfile

DEFAULT_PASSWORD = "correct-horse-battery"
DEFAULT_PHONE = "+1 555 010 0000"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class RecordingNotifier:
    """NotificationSender that records requests and can be made to fail or hang."""

    def __init__(self):
        self.sent: List[Tuple[str, NotificationKind, Dict[str, Any]]] = []
        self.fail = False
        self.delay: Optional[float] = None

    async def send(self, destination_email: str, template_kind: NotificationKind, payload: Dict[str, Any]) -> bool:
        if self.delay is not None:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ConnectionError("mail relay unreachable")
        self.sent.append((destination_email, template_kind, payload))
        return True

    def of_kind(self, kind: NotificationKind) -> List[Tuple[str, NotificationKind, Dict[str, Any]]]:
        return [entry for entry in self.sent if entry[1] == kind]

    def last_token_for(self, email: str) -> str:
        for destination, kind, payload in reversed(self.sent):
            if destination == email and kind == NotificationKind.INVITATION_CREATED:
                return payload["token"]
        raise AssertionError(f"no invitation sent to {email}")


async def create_test_user(
    session_factory: async_sessionmaker,
    email: str,
    password: str = DEFAULT_PASSWORD,
    role: UserRole = UserRole.ADMIN
) -> User:
    async with session_factory() as session:
        async with session.begin():
            user = await create_user(session, email=email, password_hash=get_password_hash(password), role=role)
    return user


async def admit_member(
    service: AdmissionService,
    notifier: RecordingNotifier,
    reviewer_id: UUID,
    name: str,
    email: str,
    password: str = DEFAULT_PASSWORD
) -> MemberProfile:
    """Walk one applicant through submit, approve and register."""
    application = await service.submit_application(name=name, email=email, company=f"{name} Ltd")
    await service.approve(application.id, reviewer_id)
    token = notifier.last_token_for(application.email)
    return await service.register(token, full_name=name, phone=DEFAULT_PHONE, password=password)


def bearer(user_id: UUID) -> Dict[str, str]:
    token = create_access_token(data={"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


async def member_headers(session_factory: async_sessionmaker, member_id: UUID) -> Dict[str, str]:
    async with session_factory() as session:
        member = await get_member_by_id(session, member_id)
    return bearer(member.user_id)
