import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.models.customer import Customer
from src.models.subscription import Subscription
from src.repositories.subscriptions import ProductVariantRepository, SubscriptionRepository
from src.services.eligibility import EligibilityEvaluator
from src.services.errors import ConflictError, InfrastructureError, SubscriptionError
from src.services.outcomes import Informational, Outcome, Rejected, Success
from src.services.sender import NotificationSender
from src.services.tokens import generate_token

logger = logging.getLogger(__name__)

SUCCESS_SUBSCRIPTION_TEMPLATE = "success_subscription"
NOTHING_TO_DELETE = "nothing to delete"


def subscription_payload(sub: Subscription) -> Dict[str, Any]:
    """Plain-data view of a subscription for the notification job."""
    variant = sub.product_variant
    return {
        "id": str(sub.id),
        "email": sub.email,
        "token": sub.token,
        "product_variant_code": variant.code if variant else None,
        "product_variant_name": variant.name if variant else None,
        "channel_code": sub.channel_code,
        "locale_code": sub.locale_code,
    }


class SubscriptionLifecycle:
    """
    Creates and removes back-in-stock subscriptions.

    Request context (customer, channel, locale) is passed in explicitly by
    the caller; the engine only talks to its collaborators.
    """

    def __init__(
        self,
        subscriptions: SubscriptionRepository,
        variants: ProductVariantRepository,
        sender: NotificationSender,
        evaluator: Optional[EligibilityEvaluator] = None,
    ):
        self.subscriptions = subscriptions
        self.variants = variants
        self.sender = sender
        self.evaluator = evaluator or EligibilityEvaluator(variants, subscriptions)

    async def create(
        self,
        email: Optional[str],
        product_variant_code: str,
        customer: Optional[Customer],
        channel_code: str,
        locale_code: str,
    ) -> Outcome:
        # 1) Eligibility, no side effects on rejection
        try:
            eligibility = await self.evaluator.evaluate(email, product_variant_code, customer)
        except SubscriptionError as e:
            logger.info(f"[Subscribe] Rejected {product_variant_code!r}: {e.message}")
            return Rejected(e)

        # 2) Build the record; no token means nothing gets persisted
        try:
            token = generate_token()
        except InfrastructureError as e:
            logger.exception("[Subscribe] Token generation failed")
            return Rejected(e)

        now = datetime.utcnow()
        sub = Subscription(
            email=eligibility.email,
            customer=eligibility.customer,
            product_variant=eligibility.variant,
            channel_code=channel_code,
            locale_code=locale_code,
            token=token,
            created_at=now,
            updated_at=now,
        )

        # 3) Persist; a rollback expires the variant, keep its keys around
        variant_id, variant_code = eligibility.variant.id, eligibility.variant.code
        try:
            await self.subscriptions.add(sub)
        except IntegrityError as exc:
            return await self._insert_conflict(eligibility.email, variant_id, variant_code, exc)
        except SQLAlchemyError:
            logger.exception(f"[Subscribe] Could not save subscription for {variant_code!r}")
            return Rejected(InfrastructureError("Unable to save the subscription"))

        logger.info(f"[Subscribe] {sub.email} subscribed to {variant_code!r} ({sub.id})")

        # 4) Confirmation mail; the subscription stands even if this fails
        notification_id = None
        try:
            notification_id = self.sender.send(
                SUCCESS_SUBSCRIPTION_TEMPLATE,
                [sub.email],
                {
                    "subscription": subscription_payload(sub),
                    "channel": sub.channel_code,
                    "localeCode": sub.locale_code,
                },
                subscription_id=sub.id,
            )
        except Exception:
            logger.exception(f"[Subscribe] Could not dispatch confirmation for {sub.id}")

        return Success("form_submission.subscription_successfully", sub, notification_id)

    async def _insert_conflict(self, email, variant_id, variant_code, exc: IntegrityError) -> Rejected:
        # Lost a race against a concurrent duplicate, or a token collision
        existing = await self.subscriptions.find_one(email=email, product_variant_id=variant_id)
        if existing is not None:
            logger.info(f"[Subscribe] Concurrent duplicate for {email} / {variant_code!r}")
            return Rejected(ConflictError(
                f"{email} is already subscribed to {variant_code!r}",
                context={"email": existing.email},
            ))
        logger.error(f"[Subscribe] Insert failed: {exc}")
        return Rejected(InfrastructureError("Unable to save the subscription"))

    async def delete(self, token: str) -> Outcome:
        sub = await self.subscriptions.find_by_token(token)
        if sub is None:
            logger.info("[Unsubscribe] No subscription for token")
            return Informational(NOTHING_TO_DELETE)

        sub_id = sub.id
        try:
            await self.subscriptions.remove(sub)
        except SQLAlchemyError:
            logger.exception(f"[Unsubscribe] Could not remove subscription {sub_id}")
            return Rejected(InfrastructureError(
                "Unable to remove the subscription",
                message_key="deletion_submission.failed",
            ))
        logger.info(f"[Unsubscribe] Removed subscription {sub_id}")
        return Success("deletion_submission.successful")

    async def list_for_owner(self, customer_id: UUID) -> List[Subscription]:
        return await self.subscriptions.find_by_customer(customer_id)
