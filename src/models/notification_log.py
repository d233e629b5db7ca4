import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, Integer, Text, Uuid
from sqlalchemy.orm import foreign, relationship
from src.db.session import Base
from src.models.subscription import Subscription

OUTCOME_SENT = "Success"
OUTCOME_RETRYING = "Failed Attempt"
OUTCOME_FAILED = "Failure"


class NotificationLog(Base):
    """One attempt at mailing a subscriber; a queued mail may take several."""

    __tablename__ = "notification_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    notification_id = Column(Uuid, nullable=False, index=True)
    # No FK: the log outlives the subscription until retention purges it
    subscription_id = Column(Uuid, nullable=True, index=True)
    template_key = Column(Text, nullable=False)
    recipient = Column(Text, nullable=False)
    attempt_number = Column(Integer, nullable=False)
    outcome = Column(Text, nullable=False)
    status_code = Column(Integer, nullable=True)
    error = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)

    subscription = relationship(
        Subscription,
        primaryjoin=foreign(subscription_id) == Subscription.id,
        viewonly=True,
        lazy="selectin",
    )

    @property
    def is_final(self) -> bool:
        return self.outcome in (OUTCOME_SENT, OUTCOME_FAILED)
