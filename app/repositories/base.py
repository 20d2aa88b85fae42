"""
Base Repository
Generic CRUD helpers for models with an integer ``id`` primary key
"""

from typing import Generic, Sequence, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository bound to one model and one session

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def create(self, obj: ModelType) -> ModelType:
        """
        Insert a new row

        Returns:
            The instance, refreshed so server defaults (id, created_at) are loaded
        """
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj

    async def get_all(
        self,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[ModelType]:
        """
        Rows ordered by primary key

        Args:
            limit: Maximum number of rows (None for all)
            offset: Number of rows to skip
        """
        stmt = select(self.model).order_by(self.model.id).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()
