import os
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.session import get_async_db
from src.models.customer import Customer
from src.repositories.subscriptions import (
    CustomerRepository,
    ProductVariantRepository,
    SubscriptionRepository,
)
from src.services.lifecycle import SubscriptionLifecycle
from src.services.sender import NotificationSender

DEFAULT_CHANNEL_CODE = os.getenv("DEFAULT_CHANNEL_CODE", "WEB")
DEFAULT_LOCALE_CODE = os.getenv("DEFAULT_LOCALE_CODE", "en_US")


async def get_current_customer(
    x_customer_id: str | None = Header(None),
    db: AsyncSession = Depends(get_async_db),
) -> Customer | None:
    """The authenticated customer, if the session layer identified one."""
    if not x_customer_id:
        return None
    try:
        customer_id = UUID(x_customer_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-Customer-Id header.",
        )
    customer = await CustomerRepository(db).find_one(id=customer_id)
    if customer is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown customer",
        )
    return customer


def get_channel_code(x_channel_code: str | None = Header(None)) -> str:
    return x_channel_code or DEFAULT_CHANNEL_CODE


def get_locale_code(x_locale_code: str | None = Header(None)) -> str:
    return x_locale_code or DEFAULT_LOCALE_CODE


def get_sender() -> NotificationSender:
    return NotificationSender()


def get_lifecycle(
    db: AsyncSession = Depends(get_async_db),
    sender: NotificationSender = Depends(get_sender),
) -> SubscriptionLifecycle:
    return SubscriptionLifecycle(
        SubscriptionRepository(db),
        ProductVariantRepository(db),
        sender,
    )
