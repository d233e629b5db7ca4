from typing import List, Optional
from uuid import UUID

from src.models.customer import Customer
from src.models.product_variant import ProductVariant
from src.models.subscription import Subscription
from src.repositories.base import Repository


class SubscriptionRepository(Repository[Subscription]):
    model = Subscription

    async def find_by_token(self, token: str) -> Optional[Subscription]:
        return await self.find_one(token=token)

    async def find_for_variant(self, email: str, variant: ProductVariant) -> Optional[Subscription]:
        return await self.find_one(email=email, product_variant_id=variant.id)

    async def find_by_customer(self, customer_id: UUID) -> List[Subscription]:
        # Insertion order
        return await self.find_many(
            order_by=Subscription.created_at,
            customer_id=customer_id,
        )


class ProductVariantRepository(Repository[ProductVariant]):
    model = ProductVariant

    async def find_by_code(self, code: str) -> Optional[ProductVariant]:
        return await self.find_one(code=code)


class CustomerRepository(Repository[Customer]):
    model = Customer
