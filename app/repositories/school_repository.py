"""
School repositories
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.school import School, SchoolEmbedding
from app.repositories.base import BaseRepository


class SchoolRepository(BaseRepository[School]):
    """Schools table access"""

    def __init__(self, session: AsyncSession):
        super().__init__(School, session)

    async def list_by_name(self) -> Sequence[School]:
        """All schools ordered by name (listing page order)"""

        stmt = select(School).order_by(School.name.asc(), School.id.asc())
        result = await self.session.execute(stmt)
        return result.scalars().all()


class SchoolEmbeddingRepository:
    """Persisted school vectors, one row per school"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, school_id: int) -> SchoolEmbedding | None:
        return await self.session.get(SchoolEmbedding, school_id)

    async def upsert(
        self,
        school_id: int,
        vector: Sequence[float],
        model: str | None = None,
    ) -> SchoolEmbedding:
        """Insert or replace the vector stored for ``school_id``"""

        row = await self.get(school_id)
        if row is None:
            row = SchoolEmbedding(
                school_id=school_id,
                embedding=list(vector),
                dimension=len(vector),
                model=model,
            )
            self.session.add(row)
        else:
            row.embedding = list(vector)
            row.dimension = len(vector)
            row.model = model

        await self.session.flush()
        return row
