import logging
import uuid
from typing import Any, Dict, List, Optional

from src.queue.redis_conn import notification_queue

logger = logging.getLogger(__name__)


class NotificationSender:
    """
    Hands a templated message over to the notification worker.

    Delivery happens out of band; ``send`` only enqueues the job and returns
    the notification id that the delivery logs are keyed by.
    """

    def __init__(self, queue=None):
        self.queue = queue if queue is not None else notification_queue

    def send(
        self,
        template_key: str,
        recipients: List[str],
        context: Dict[str, Any],
        subscription_id: Optional[uuid.UUID] = None,
    ) -> uuid.UUID:
        notification_id = uuid.uuid4()
        self.queue.enqueue(
            "src.workers.notification_worker.process_notification_sync",
            str(notification_id),
            template_key,
            recipients,
            context,
            str(subscription_id) if subscription_id else None,
            1,  # attempt number
        )
        logger.info(f"[Notify] Queued {template_key} ({notification_id}) for {len(recipients)} recipient(s)")
        return notification_id
