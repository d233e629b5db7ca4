import logging
import os
import uuid
from datetime import datetime, timedelta
from typing import Optional, Dict, Any, List, Union
import httpx
from sqlalchemy.ext.asyncio import AsyncSession
import asyncio

from src.db.session import AsyncSessionLocal
from src.models.notification_log import NotificationLog, OUTCOME_FAILED, OUTCOME_RETRYING, OUTCOME_SENT
from src.queue.redis_conn import notification_queue

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

HTTP_TIMEOUT = int(os.getenv("HTTP_TIMEOUT", "5"))
MAIL_API_URL = os.getenv("MAIL_API_URL")
MAIL_FROM = os.getenv("MAIL_FROM", "no-reply@example.com")
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")
MAX_ATTEMPTS = 5
BACKOFF_SCHEDULE = [10, 30, 60, 300, 900]  # seconds

# template key -> (subject, text body)
TEMPLATES = {
    "success_subscription": (
        "You will be notified when {product_name} is back in stock",
        "Hello,\n\n"
        "we will email you as soon as {product_name} ({product_code}) is "
        "available again on {channel}.\n\n"
        "Changed your mind? Cancel this notification here:\n"
        "{unsubscribe_url}\n",
    ),
}


class UnknownTemplateError(LookupError):
    pass


def ensure_uuid(value: Union[str, uuid.UUID, None]) -> Optional[uuid.UUID]:
    """Convert string to UUID if needed."""
    if isinstance(value, str):
        return uuid.UUID(value)
    return value


def unsubscribe_url(token: str) -> str:
    return f"{PUBLIC_BASE_URL.rstrip('/')}/subscriptions/delete/{token}"


def render_message(template_key: str, context: Dict[str, Any]) -> Dict[str, str]:
    """Render subject and text body of a notification template."""
    try:
        subject_tpl, body_tpl = TEMPLATES[template_key]
    except KeyError:
        raise UnknownTemplateError(template_key)

    sub = context.get("subscription") or {}
    values = {
        "product_name": sub.get("product_variant_name") or sub.get("product_variant_code") or "this product",
        "product_code": sub.get("product_variant_code") or "",
        "channel": context.get("channel") or "",
        "locale": context.get("localeCode") or "",
        "unsubscribe_url": unsubscribe_url(sub.get("token", "")),
    }
    return {
        "subject": subject_tpl.format(**values),
        "text": body_tpl.format(**values),
    }


async def log_notification_attempt(
    session: AsyncSession,
    notification_id: Union[str, uuid.UUID],
    subscription_id: Union[str, uuid.UUID, None],
    template_key: str,
    recipient: str,
    timestamp: datetime,
    attempt_number: int,
    outcome: str,
    status_code: Optional[int] = None,
    error: Optional[str] = None,
):
    """Log a notification delivery attempt to the database."""
    log = NotificationLog(
        notification_id=ensure_uuid(notification_id),
        subscription_id=ensure_uuid(subscription_id),
        template_key=template_key,
        recipient=recipient,
        timestamp=timestamp,
        attempt_number=attempt_number,
        outcome=outcome,
        status_code=status_code,
        error=error,
    )
    session.add(log)
    await session.commit()


def schedule_retry(
    notification_id: str,
    template_key: str,
    recipients: List[str],
    context: Dict[str, Any],
    subscription_id: Optional[str],
    attempt: int,
):
    delay = BACKOFF_SCHEDULE[attempt - 1]
    notification_queue.enqueue_in(
        timedelta(seconds=delay),
        process_notification_sync,
        notification_id,
        template_key,
        recipients,
        context,
        subscription_id,
        attempt + 1,
    )


async def process_notification(
    notification_id: Union[str, uuid.UUID],
    template_key: str,
    recipients: List[str],
    context: Dict[str, Any],
    subscription_id: Union[str, uuid.UUID, None],
    attempt: int,
):
    """
    1) Render the template for the given context.
    2) POST the message to the mail relay.
    3) Log each attempt to the database.
    4) If attempt < MAX, reschedule with exponential backoff.
    """
    notification_id_str = str(notification_id)
    sub_id_str = str(subscription_id) if subscription_id else None
    recipient = ", ".join(recipients)

    if not MAIL_API_URL:
        logger.error(f"[Notify] MAIL_API_URL not set, dropping {notification_id_str}")
        return

    try:
        message = render_message(template_key, context)
    except UnknownTemplateError:
        logger.error(f"[Notify] Unknown template {template_key!r}, dropping {notification_id_str}")
        return

    async with AsyncSessionLocal() as session:
        try:
            status_code = None
            error_details = None
            outcome = None

            try:
                async with httpx.AsyncClient(timeout=HTTP_TIMEOUT) as client:
                    resp = await client.post(
                        MAIL_API_URL,
                        json={
                            "from": MAIL_FROM,
                            "to": recipients,
                            "subject": message["subject"],
                            "text": message["text"],
                        },
                    )
                    status_code = resp.status_code
                    if 200 <= status_code < 300:
                        outcome = OUTCOME_SENT
                    else:
                        error_details = f"HTTP {status_code}"
                        logger.error(f"Notification failed: {error_details}")
            except Exception as exc:
                error_details = str(exc)
                logger.error(f"Notification failed: {error_details}")

            if outcome is None:
                # Recoverable failure: log & re-enqueue if attempts remain
                if attempt < MAX_ATTEMPTS:
                    await log_notification_attempt(
                        session,
                        notification_id,
                        subscription_id,
                        template_key,
                        recipient,
                        datetime.utcnow(),
                        attempt,
                        OUTCOME_RETRYING,
                        status_code,
                        error_details,
                    )
                    schedule_retry(
                        notification_id_str,
                        template_key,
                        recipients,
                        context,
                        sub_id_str,
                        attempt,
                    )
                    return
                outcome = OUTCOME_FAILED

            # Final log (either success or last failure)
            await log_notification_attempt(
                session,
                notification_id,
                subscription_id,
                template_key,
                recipient,
                datetime.utcnow(),
                attempt,
                outcome,
                status_code,
                error_details,
            )

        except Exception as e:
            logger.error(f"Error processing notification: {str(e)}")
            raise


def process_notification_sync(
    notification_id: Union[str, uuid.UUID],
    template_key: str,
    recipients: List[str],
    context: Dict[str, Any],
    subscription_id: Union[str, uuid.UUID, None],
    attempt: int,
):
    """Synchronous wrapper for RQ worker compatibility."""
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        loop.run_until_complete(
            process_notification(
                notification_id,
                template_key,
                recipients,
                context,
                subscription_id,
                attempt,
            )
        )
    finally:
        loop.close()
