"""
Shared repository base.

Every repository wraps one AsyncSession and never commits; transaction
boundaries belong to the caller (see ``storefront.db.transaction``).
"""
from typing import Any, Generic, Sequence, Type, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Lookups and inserts common to the directory tables.

    Usage:
        class PromotionRepository(BaseRepository[ListingPromotion]):
            def __init__(self, db: AsyncSession):
                super().__init__(ListingPromotion, db)
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    def _filtered(self, filters: dict[str, Any]) -> Select:
        query = select(self.model)
        for column, value in filters.items():
            if not hasattr(self.model, column):
                raise AttributeError(f"{self.model.__name__} has no column {column!r}")
            query = query.where(getattr(self.model, column) == value)
        return query

    async def get_by_id(self, id: int) -> ModelType | None:
        return await self.db.get(self.model, id)

    async def find_by(
        self,
        *,
        order_by: str | None = None,
        **filters: Any,
    ) -> Sequence[ModelType]:
        """
        Rows matching every ``column=value`` filter.

        Args:
            order_by: Column to sort by, then by id
            **filters: Equality filters

        Raises:
            AttributeError: A filter or order column does not exist
        """
        query = self._filtered(filters)
        if order_by is not None:
            query = query.order_by(getattr(self.model, order_by))
        query = query.order_by(self.model.id)
        result = await self.db.execute(query)
        return result.scalars().all()

    async def create(self, **values: Any) -> ModelType:
        """Insert a row and return it with server defaults loaded."""
        instance = self.model(**values)
        self.db.add(instance)
        await self.db.flush()
        await self.db.refresh(instance)
        return instance
