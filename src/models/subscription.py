import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from src.db.session import Base
from src.models.customer import Customer
from src.models.product_variant import ProductVariant


class Subscription(Base):
    __tablename__ = "subscriptions"
    # Backs the engine's check-then-insert against concurrent duplicates
    __table_args__ = (
        UniqueConstraint("email", "product_variant_id", name="uq_subscription_email_variant"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(Text, nullable=False)
    customer_id = Column(
        Uuid,
        ForeignKey("customers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    product_variant_id = Column(
        Uuid,
        ForeignKey("product_variants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    channel_code = Column(Text, nullable=False)
    locale_code = Column(Text, nullable=False)
    token = Column(Text, nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)

    customer = relationship(Customer, lazy="selectin")
    product_variant = relationship(ProductVariant, lazy="selectin")
