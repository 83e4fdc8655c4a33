"""
Notification delivery tasks (email)
"""

import hashlib
import json
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, Tuple

from redis.exceptions import RedisError

from app.celery_app import celery
from app.core.config import settings
from app.core.redis_client import get_sync_redis
from app.models.enums import NotificationKind

logger = logging.getLogger(__name__)

IDEMPOTENCY_TTL_SECONDS = 86400  # 24 hours


def idempotency_key(destination_email: str, template_kind: str, payload: Dict[str, Any]) -> str:
    digest = hashlib.sha256(
        json.dumps([destination_email, template_kind, payload], sort_keys=True, default=str).encode()
    ).hexdigest()
    return f"notification:{template_kind}:{digest}"


def render(template_kind: str, payload: Dict[str, Any]) -> Tuple[str, str]:
    """
    Render subject and HTML body for a notification kind.

    Raises:
        ValueError: unknown template kind
    """
    kind = NotificationKind(template_kind)
    name = payload.get("name", "")

    if kind == NotificationKind.APPLICATION_RECEIVED:
        return (
            f"We received your application to {settings.app_name}",
            f"""
            <html>
                <body>
                    <h2>Thanks for applying, {name}!</h2>
                    <p>Your application is now waiting for review by an administrator.</p>
                    <p>We will email you as soon as a decision is made.</p>
                </body>
            </html>
            """,
        )

    if kind == NotificationKind.INVITATION_CREATED:
        link = settings.registration_url.format(token=payload["token"])
        return (
            f"You're invited to join {settings.app_name}",
            f"""
            <html>
                <body>
                    <h2>Welcome aboard, {name}!</h2>
                    <p>Your application has been approved. Complete your registration here:</p>
                    <p><a href="{link}">{link}</a></p>
                    <p>This invitation expires at {payload.get("expires_at", "")} and can be used once.</p>
                </body>
            </html>
            """,
        )

    return (
        f"Your application to {settings.app_name}",
        f"""
        <html>
            <body>
                <h2>Hello {name},</h2>
                <p>Thank you for your interest. Unfortunately your application was not accepted.</p>
            </body>
        </html>
        """,
    )


def send_email(to_email: str, subject: str, html_content: str) -> None:
    message = MIMEMultipart()
    message["From"] = settings.mail_from
    message["To"] = to_email
    message["Subject"] = subject
    message.attach(MIMEText(html_content, "html"))

    with smtplib.SMTP(settings.mail_server, settings.mail_port) as server:
        if settings.mail_use_tls:
            server.starttls()
        if settings.mail_username:
            server.login(settings.mail_username, settings.mail_password or "")
        server.send_message(message)


@celery.task(bind=True, max_retries=3, default_retry_delay=60)
def deliver_notification(self, destination_email: str, template_kind: str, payload: Dict[str, Any]):
    """
    Deliver one notification email.

    Args:
        destination_email: Recipient address
        template_kind: NotificationKind value
        payload: Template variables

    Returns:
        True if sent (or already sent), False for an unknown template
    """
    try:
        subject, body = render(template_kind, payload)
    except (ValueError, KeyError) as e:
        logger.error(f"Cannot render notification {template_kind}: {e}")
        return False

    redis_client = get_sync_redis()
    key = idempotency_key(destination_email, template_kind, payload)

    # Check if notification already sent; without Redis, send undeduplicated
    try:
        already_sent = redis_client.exists(key)
    except RedisError as e:
        logger.warning(f"Idempotency check unavailable for {template_kind}, sending anyway: {e}")
        already_sent = False

    if already_sent:
        logger.info(f"Notification {template_kind} already delivered, skipping")
        return True

    try:
        send_email(destination_email, subject, body)
    except (smtplib.SMTPException, OSError) as e:
        logger.warning(f"Failed to deliver {template_kind} notification: {e}")
        raise self.retry(exc=e)

    # Mark notification as sent
    try:
        redis_client.setex(key, IDEMPOTENCY_TTL_SECONDS, "sent")
    except RedisError as e:
        logger.warning(f"Could not record delivery of {template_kind}: {e}")
    logger.info(f"Notification {template_kind} delivered")
    return True
