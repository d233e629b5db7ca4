from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.session import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """
    Keyed store over one mapped model.

    Criteria are plain column equality filters, e.g.
    ``find_one(email="a@example.com", product_variant_id=variant.id)``.
    """

    model: Type[ModelT]

    def __init__(self, db: AsyncSession, model: Optional[Type[ModelT]] = None):
        self.db = db
        if model is not None:
            self.model = model

    async def find_one(self, **criteria: Any) -> Optional[ModelT]:
        result = await self.db.execute(
            select(self.model).filter_by(**criteria).limit(1)
        )
        return result.scalars().first()

    async def find_many(self, order_by=None, **criteria: Any) -> List[ModelT]:
        stmt = select(self.model).filter_by(**criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def add(self, obj: ModelT) -> ModelT:
        self.db.add(obj)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return obj

    async def remove(self, obj: ModelT) -> None:
        await self.db.delete(obj)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
