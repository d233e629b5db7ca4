from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.context import get_current_customer, get_lifecycle
from src.api.routes.subscriptions import to_out
from src.api.schemas import SubscriptionOut
from src.models.customer import Customer
from src.services.lifecycle import SubscriptionLifecycle

router = APIRouter()

@router.get(
    "/account/subscriptions",
    response_model=List[SubscriptionOut],
    summary="List the current customer's back-in-stock subscriptions",
)
async def list_account_subscriptions(
    customer: Customer | None = Depends(get_current_customer),
    lifecycle: SubscriptionLifecycle = Depends(get_lifecycle),
):
    if customer is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    subs = await lifecycle.list_for_owner(customer.id)
    return [to_out(sub) for sub in subs]
