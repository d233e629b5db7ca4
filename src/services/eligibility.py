from dataclasses import dataclass
from typing import Optional

from src.models.customer import Customer
from src.models.product_variant import ProductVariant
from src.repositories.subscriptions import ProductVariantRepository, SubscriptionRepository
from src.services.availability import AvailabilityChecker
from src.services.errors import ConflictError, NotFoundError, ValidationError
from src.services.validation import EmailValidator


@dataclass
class Eligibility:
    """What a successful evaluation resolved: who to notify about what."""

    email: str
    variant: ProductVariant
    customer: Optional[Customer] = None


class EligibilityEvaluator:
    """
    Decides whether an (email-or-customer, variant) pair may subscribe.

    Checks run in order and the first failure wins:
    contact email, variant lookup, stock, existing subscription.
    """

    def __init__(
        self,
        variants: ProductVariantRepository,
        subscriptions: SubscriptionRepository,
        availability: Optional[AvailabilityChecker] = None,
        validator: Optional[EmailValidator] = None,
    ):
        self.variants = variants
        self.subscriptions = subscriptions
        self.availability = availability or AvailabilityChecker()
        self.validator = validator or EmailValidator()

    async def evaluate(
        self,
        email: Optional[str],
        product_variant_code: str,
        customer: Optional[Customer] = None,
    ) -> Eligibility:
        email, owner = self.resolve_email(email, customer)

        variant = await self.variants.find_by_code(product_variant_code)
        if variant is None:
            raise NotFoundError(
                f"Product variant {product_variant_code!r} not found",
                context={"product_variant_code": product_variant_code},
            )

        if self.availability.is_stock_available(variant):
            raise ConflictError(
                f"Product variant {variant.code!r} is not out of stock",
                message_key="form_submission.variant_not_oos",
                context={"product_variant_code": variant.code},
            )

        existing = await self.subscriptions.find_for_variant(email, variant)
        if existing is not None:
            raise ConflictError(
                f"{email} is already subscribed to {variant.code!r}",
                context={"email": existing.email},
            )

        return Eligibility(email=email, variant=variant, customer=owner)

    def resolve_email(self, email: Optional[str], customer: Optional[Customer]):
        """Return the contact email and the owner to attach, if any."""
        if email is not None:
            email = email.strip()
            if not email:
                raise ValidationError("An email address is required")
            violations = self.validator.validate(email)
            if violations:
                raise ValidationError(
                    violations[0],
                    context={"violations": violations},
                )
            return self.validator.normalize(email), None

        if customer is not None and customer.email:
            # Same normal form as a typed-in address, so dedup matches both
            if self.validator.validate(customer.email):
                raise ValidationError("The account email address is not valid")
            return self.validator.normalize(customer.email), customer

        raise ValidationError("An email address is required")
