"""
Outbound notification emission

The admission core hands notification requests to a NotificationSender after
its transaction has committed. Delivery is fire-and-forget: a failing or slow
sender is logged and counted, never raised to the caller.

schedule_emit runs emit as a tracked background task so the caller does not
wait on the mail channel; drain_pending awaits whatever is still in flight.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol, Set

from app.core.metrics import NOTIFICATIONS_EMITTED
from app.models.enums import NotificationKind

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    async def send(self, destination_email: str, template_kind: NotificationKind, payload: Dict[str, Any]) -> bool:
        ...


class CeleryNotificationSender:
    """Enqueues deliver_notification on the Celery broker"""

    async def send(self, destination_email: str, template_kind: NotificationKind, payload: Dict[str, Any]) -> bool:
        from app.tasks.notify import deliver_notification

        # .delay talks to the broker synchronously
        await asyncio.to_thread(
            deliver_notification.delay, destination_email, template_kind.value, payload
        )
        return True


async def emit(
    sender: NotificationSender,
    destination_email: str,
    template_kind: NotificationKind,
    payload: Dict[str, Any],
    timeout: float
) -> bool:
    """
    Send a notification without letting failures escape.

    Returns:
        True if the sender accepted the request
    """
    try:
        accepted = await asyncio.wait_for(
            sender.send(destination_email, template_kind, payload), timeout=timeout
        )
    except asyncio.TimeoutError:
        logger.error(f"Notification {template_kind.value} timed out after {timeout}s")
        accepted = False
    except Exception as e:
        logger.exception(f"Notification {template_kind.value} failed: {e}")
        accepted = False

    NOTIFICATIONS_EMITTED.labels(
        kind=template_kind.value, outcome="accepted" if accepted else "failed"
    ).inc()
    return bool(accepted)


_pending: Set["asyncio.Task[bool]"] = set()


def schedule_emit(
    sender: NotificationSender,
    destination_email: str,
    template_kind: NotificationKind,
    payload: Dict[str, Any],
    timeout: float
) -> "asyncio.Task[bool]":
    """Run emit in the background, keeping a reference until it finishes."""
    task = asyncio.create_task(emit(sender, destination_email, template_kind, payload, timeout=timeout))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task


async def drain_pending(timeout: Optional[float] = None) -> int:
    """
    Wait for scheduled notifications to finish.

    Returns:
        Number of notifications still running when the timeout elapsed
    """
    if not _pending:
        return 0
    _, still_running = await asyncio.wait(set(_pending), timeout=timeout)
    if still_running:
        logger.warning(f"{len(still_running)} notifications still pending")
    return len(still_running)
