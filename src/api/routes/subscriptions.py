from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.context import (
    get_channel_code,
    get_current_customer,
    get_lifecycle,
    get_locale_code,
)
from src.api.messages import translate
from src.api.schemas import MessageOut, SubscriptionCreate, SubscriptionCreated
from src.models.customer import Customer
from src.models.subscription import Subscription
from src.services.errors import (
    ConflictError,
    InfrastructureError,
    NotFoundError,
    ValidationError,
)
from src.services.lifecycle import SubscriptionLifecycle
from src.services.outcomes import Rejected, Success

router = APIRouter()

REJECTION_STATUS = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    InfrastructureError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_out(sub: Subscription) -> dict:
    return {
        "id": sub.id,
        "email": sub.email,
        "customer_id": sub.customer_id,
        "product_variant_code": sub.product_variant.code,
        "channel_code": sub.channel_code,
        "locale_code": sub.locale_code,
        "created_at": sub.created_at,
        "updated_at": sub.updated_at,
    }


def raise_rejection(outcome: Rejected):
    error = outcome.error
    status_code = REJECTION_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST)
    if isinstance(error, ValidationError) and error.context.get("violations"):
        # Surface the validator's own message, as the storefront form does
        detail = error.message
    else:
        detail = translate(outcome.message_key, outcome.context, fallback=error.message)
    raise HTTPException(status_code=status_code, detail=detail)


@router.post(
    "/",
    response_model=SubscriptionCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Ask to be notified when an out-of-stock variant is back",
)
async def create_subscription(
    subscription_in: SubscriptionCreate,
    product_variant_code: str | None = Query(None),
    customer: Customer | None = Depends(get_current_customer),
    channel_code: str = Depends(get_channel_code),
    locale_code: str = Depends(get_locale_code),
    lifecycle: SubscriptionLifecycle = Depends(get_lifecycle),
):
    # The form may carry the variant in the query string instead of the body
    code = subscription_in.product_variant_code or product_variant_code
    if not code:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=translate("form_submission.invalid_form"),
        )

    outcome = await lifecycle.create(
        subscription_in.email,
        code,
        customer,
        channel_code,
        locale_code,
    )
    if isinstance(outcome, Rejected):
        raise_rejection(outcome)

    return {
        **to_out(outcome.subscription),
        "notification_id": outcome.notification_id,
        "detail": translate(outcome.message_key),
    }


async def _delete(token: str, lifecycle: SubscriptionLifecycle) -> dict:
    outcome = await lifecycle.delete(token)
    if isinstance(outcome, Rejected):
        raise_rejection(outcome)
    # Removed or not, the answer is informational: the link may simply be stale
    if isinstance(outcome, Success):
        return {"detail": translate(outcome.message_key), "severity": "info"}
    return {
        "detail": translate(outcome.message_key, fallback=outcome.message),
        "severity": "info",
    }


@router.get(
    "/delete/{token}",
    response_model=MessageOut,
    summary="Cancel a subscription from the link in the confirmation mail",
)
async def delete_subscription_link(
    token: str,
    lifecycle: SubscriptionLifecycle = Depends(get_lifecycle),
):
    return await _delete(token, lifecycle)


@router.delete(
    "/{token}",
    response_model=MessageOut,
    summary="Cancel a subscription by its token",
)
async def delete_subscription(
    token: str,
    lifecycle: SubscriptionLifecycle = Depends(get_lifecycle),
):
    return await _delete(token, lifecycle)
