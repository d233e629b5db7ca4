import logging
import os
from datetime import datetime, timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from src.db.session import AsyncSessionLocal
from src.repositories.notification_logs import NotificationLogRepository

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

LOG_RETENTION_HOURS = int(os.getenv("LOG_RETENTION_HOURS", "72"))


async def purge_notification_logs(db: AsyncSession, hours: int = LOG_RETENTION_HOURS) -> dict:
    """
    Drop mail attempt logs past the retention window, and the logs of
    subscribers who have since unsubscribed, whatever their age.
    The caller owns the transaction.
    """
    logs = NotificationLogRepository(db)
    cutoff = datetime.utcnow() - timedelta(hours=hours)
    expired = await logs.purge_before(cutoff)
    unsubscribed = await logs.purge_unsubscribed()
    logger.info(
        f"[Retention] Purged {expired} log(s) before {cutoff.isoformat()}, "
        f"{unsubscribed} of unsubscribed recipients"
    )
    return {"expired": expired, "unsubscribed": unsubscribed}


def purge_notification_logs_sync():
    """RQ entry point; schedule it hourly next to the notification worker."""
    import asyncio

    async def _run():
        async with AsyncSessionLocal() as db:
            async with db.begin():
                return await purge_notification_logs(db)

    return asyncio.run(_run())
