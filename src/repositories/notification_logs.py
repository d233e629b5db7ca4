from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy import delete, func, select

from src.models.notification_log import NotificationLog
from src.models.subscription import Subscription
from src.repositories.base import Repository


class NotificationLogRepository(Repository[NotificationLog]):
    model = NotificationLog

    async def count_attempts(self, notification_id: UUID) -> int:
        return await self.db.scalar(
            select(func.count(NotificationLog.id))
            .where(NotificationLog.notification_id == notification_id)
        )

    async def recent_attempts(self, notification_id: UUID, limit: int = 20) -> List[NotificationLog]:
        """Attempts for one queued mail, newest first."""
        result = await self.db.execute(
            select(NotificationLog)
            .where(NotificationLog.notification_id == notification_id)
            .order_by(NotificationLog.timestamp.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def for_subscription(self, subscription_id: UUID, limit: int = 20) -> List[NotificationLog]:
        """Every attempt at mailing one subscriber, newest first."""
        result = await self.db.execute(
            select(NotificationLog)
            .where(NotificationLog.subscription_id == subscription_id)
            .order_by(NotificationLog.timestamp.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def purge_before(self, cutoff: datetime) -> int:
        result = await self.db.execute(
            delete(NotificationLog).where(NotificationLog.timestamp < cutoff)
        )
        return result.rowcount

    async def purge_unsubscribed(self) -> int:
        """Drop the logs of subscriptions that were deleted; they hold the recipient address."""
        live = select(Subscription.id)
        result = await self.db.execute(
            delete(NotificationLog)
            .where(NotificationLog.subscription_id.is_not(None))
            .where(NotificationLog.subscription_id.not_in(live))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
