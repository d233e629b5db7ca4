from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from uuid import UUID

from src.models.subscription import Subscription
from src.services.errors import SubscriptionError


@dataclass
class Success:
    message_key: str
    subscription: Optional[Subscription] = None
    # Set when the confirmation mail was queued
    notification_id: Optional[UUID] = None


@dataclass
class Rejected:
    error: SubscriptionError

    @property
    def reason(self) -> str:
        return type(self.error).__name__

    @property
    def context(self) -> Dict[str, Any]:
        return self.error.context

    @property
    def message_key(self) -> str:
        return self.error.message_key


@dataclass
class Informational:
    message: str
    message_key: str = "deletion_submission.not-successful"


Outcome = Union[Success, Rejected, Informational]
