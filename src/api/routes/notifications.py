from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.schemas import NotificationAttempt, NotificationStatus
from src.db.session import get_async_db
from src.models.notification_log import NotificationLog
from src.repositories.notification_logs import NotificationLogRepository

router = APIRouter()


def status_of(notification_id: UUID, total: int, attempts: List[NotificationLog]) -> dict:
    last = attempts[0]
    sub = last.subscription
    return {
        "notification_id": notification_id,
        "subscription_id": last.subscription_id,
        "template_key": last.template_key,
        "recipient": last.recipient,
        # None once the subscriber has unsubscribed
        "product_variant_code": sub.product_variant.code if sub else None,
        "total_attempts": total,
        "final_outcome": last.outcome,
        "delivered": last.is_final and last.status_code is not None and 200 <= last.status_code < 300,
        "last_attempt_at": last.timestamp,
        "last_status_code": last.status_code,
        "error": last.error,
        "recent_attempts": attempts,
    }


@router.get(
    "/notifications/{notification_id}",
    response_model=NotificationStatus,
    summary="Delivery status of a confirmation mail",
)
async def get_notification_status(
    notification_id: UUID,
    db: AsyncSession = Depends(get_async_db),
):
    logs = NotificationLogRepository(db)
    total = await logs.count_attempts(notification_id)
    if not total:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No delivery logs for given notification_id",
        )
    return status_of(notification_id, total, await logs.recent_attempts(notification_id))


@router.get(
    "/subscriptions/{subscription_id}/notifications",
    response_model=List[NotificationAttempt],
    summary="Mails sent to the subscriber of one subscription, newest first",
)
async def list_subscription_notifications(
    subscription_id: UUID,
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
):
    return await NotificationLogRepository(db).for_subscription(subscription_id, limit)
