from typing import List, Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class SubscriptionCreate(BaseModel):
    # Plain str: syntax is checked by the lifecycle engine so that an
    # invalid address is reported like every other rejection
    email: Optional[str] = None
    product_variant_code: Optional[str] = Field(default=None, min_length=1)

class SubscriptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    customer_id: Optional[UUID] = None
    product_variant_code: str
    channel_code: str
    locale_code: str
    created_at: datetime
    updated_at: datetime

class SubscriptionCreated(SubscriptionOut):
    # Key for GET /notifications/{notification_id}; None if queueing failed
    notification_id: Optional[UUID] = None
    detail: str

class MessageOut(BaseModel):
    detail: str
    severity: str

class NotificationAttempt(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    notification_id: UUID
    subscription_id: Optional[UUID] = None
    template_key: str
    recipient: str
    timestamp: datetime
    attempt_number: int
    outcome: str
    status_code: Optional[int] = None
    error: Optional[str] = None

class NotificationStatus(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    notification_id: UUID
    subscription_id: Optional[UUID] = None
    template_key: str
    recipient: str
    product_variant_code: Optional[str] = None
    total_attempts: int
    final_outcome: str
    delivered: bool
    last_attempt_at: datetime
    last_status_code: Optional[int] = None
    error: Optional[str] = None
    recent_attempts: List[NotificationAttempt]

