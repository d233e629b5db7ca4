import pytest

from src.models.subscription import Subscription
from src.repositories.subscriptions import ProductVariantRepository, SubscriptionRepository
from src.services.availability import AvailabilityChecker
from src.services.eligibility import EligibilityEvaluator
from src.services.errors import ConflictError, NotFoundError, ValidationError
from src.services.validation import EmailValidator


@pytest.fixture
def evaluator(async_db_session):
    return EligibilityEvaluator(
        ProductVariantRepository(async_db_session),
        SubscriptionRepository(async_db_session),
    )


async def test_explicit_email_is_used(evaluator, make_variant):
    variant = await make_variant()
    result = await evaluator.evaluate("a@example.com", "VAR-1")
    assert result.email == "a@example.com"
    assert result.variant.id == variant.id
    assert result.customer is None

async def test_empty_email_is_rejected(evaluator, make_variant):
    await make_variant()
    with pytest.raises(ValidationError):
        await evaluator.evaluate("   ", "VAR-1")

async def test_malformed_email_is_rejected_with_violation(evaluator, make_variant):
    await make_variant()
    with pytest.raises(ValidationError) as exc_info:
        await evaluator.evaluate("not-an-email", "VAR-1")
    assert exc_info.value.context["violations"]
    assert exc_info.value.message == exc_info.value.context["violations"][0]

async def test_owner_email_used_when_none_supplied(evaluator, make_variant, make_customer):
    await make_variant()
    cust = await make_customer(email="owner@example.com")
    result = await evaluator.evaluate(None, "VAR-1", cust)
    assert result.email == "owner@example.com"
    assert result.customer is cust

async def test_explicit_email_wins_over_owner(evaluator, make_variant, make_customer):
    await make_variant()
    cust = await make_customer(email="owner@example.com")
    result = await evaluator.evaluate("other@example.com", "VAR-1", cust)
    assert result.email == "other@example.com"
    assert result.customer is None

async def test_no_email_and_no_owner_is_rejected(evaluator, make_variant):
    await make_variant()
    with pytest.raises(ValidationError):
        await evaluator.evaluate(None, "VAR-1")

async def test_owner_without_email_is_rejected(evaluator, make_variant, make_customer):
    await make_variant()
    cust = await make_customer(email=None)
    with pytest.raises(ValidationError):
        await evaluator.evaluate(None, "VAR-1", cust)

async def test_unknown_variant(evaluator):
    with pytest.raises(NotFoundError) as exc_info:
        await evaluator.evaluate("a@example.com", "DOES-NOT-EXIST")
    assert exc_info.value.message_key == "form_submission.variant_not_found"

async def test_email_checked_before_variant(evaluator):
    # Fail-fast: the first failing check wins
    with pytest.raises(ValidationError):
        await evaluator.evaluate("", "DOES-NOT-EXIST")

async def test_variant_in_stock(evaluator, make_variant):
    await make_variant(on_hand=3)
    with pytest.raises(ConflictError) as exc_info:
        await evaluator.evaluate("a@example.com", "VAR-1")
    assert exc_info.value.message_key == "form_submission.variant_not_oos"

async def test_variant_fully_on_hold_is_out_of_stock(evaluator, make_variant):
    await make_variant(on_hand=2, on_hold=2)
    result = await evaluator.evaluate("a@example.com", "VAR-1")
    assert result.variant.code == "VAR-1"

async def test_untracked_variant_is_always_available(evaluator, make_variant):
    await make_variant(tracked=False, on_hand=0)
    with pytest.raises(ConflictError):
        await evaluator.evaluate("a@example.com", "VAR-1")

async def test_already_subscribed(evaluator, make_variant, async_db_session):
    variant = await make_variant()
    async_db_session.add(Subscription(
        email="a@example.com",
        product_variant=variant,
        channel_code="WEB",
        locale_code="en_US",
        token="existing-token",
    ))
    await async_db_session.commit()

    with pytest.raises(ConflictError) as exc_info:
        await evaluator.evaluate("a@example.com", "VAR-1")
    assert exc_info.value.message_key == "form_submission.already_saved"
    assert exc_info.value.context == {"email": "a@example.com"}

async def test_owner_email_is_normalized(evaluator, make_variant, make_customer):
    await make_variant()
    cust = await make_customer(email="a@EXAMPLE.com")
    result = await evaluator.evaluate(None, "VAR-1", cust)
    assert result.email == "a@example.com"

async def test_owner_conflicts_with_guest_subscription(evaluator, make_variant, make_customer, async_db_session):
    variant = await make_variant()
    async_db_session.add(Subscription(
        email="a@example.com",
        product_variant=variant,
        channel_code="WEB",
        locale_code="en_US",
        token="guest-token",
    ))
    await async_db_session.commit()
    cust = await make_customer(email="a@EXAMPLE.com")

    with pytest.raises(ConflictError):
        await evaluator.evaluate(None, "VAR-1", cust)

async def test_owner_with_invalid_email_is_rejected(evaluator, make_variant, make_customer):
    await make_variant()
    cust = await make_customer(email="not-an-email")
    with pytest.raises(ValidationError):
        await evaluator.evaluate(None, "VAR-1", cust)


def test_availability_checker():
    from src.models.product_variant import ProductVariant
    checker = AvailabilityChecker()
    assert checker.is_stock_available(ProductVariant(tracked=True, on_hand=1, on_hold=0))
    assert not checker.is_stock_available(ProductVariant(tracked=True, on_hand=1, on_hold=1))
    assert checker.is_stock_available(ProductVariant(tracked=False, on_hand=0, on_hold=0))

def test_email_validator():
    validator = EmailValidator()
    assert validator.validate("a@example.com") == []
    assert validator.validate("a@") != []
    assert validator.validate("plainaddress") != []
