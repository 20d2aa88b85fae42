"""
SQLAlchemy-backed record store for the embedding indexer.

Each call opens its own session so the indexer can run outside a
request scope. Driver and connection failures surface as StoreError.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import StoreError
from app.core.logging import get_logger
from app.repositories.school_repository import SchoolEmbeddingRepository, SchoolRepository
from app.vectorstore.protocol import RecordStoreProtocol
from app.vectorstore.schemas import SchoolRecord

logger = get_logger(__name__)


class SQLRecordStore(RecordStoreProtocol):
    """Reads schools and upserts their vectors through SQLAlchemy."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self.session_maker = session_maker

    async def fetch_all_records(self) -> list[SchoolRecord]:
        try:
            async with self.session_maker() as session:
                schools = await SchoolRepository(session).get_all()
                records = [SchoolRecord.model_validate(school) for school in schools]
        except (SQLAlchemyError, OSError) as exc:
            logger.error("record_store_fetch_failed", error=str(exc))
            raise StoreError(f"Failed to fetch records: {exc}") from exc

        logger.debug("record_store_fetched", count=len(records))
        return records

    async def upsert_vector(
        self,
        record_id: int,
        vector: Sequence[float],
        model: str | None = None,
    ) -> None:
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    await SchoolEmbeddingRepository(session).upsert(
                        record_id, vector, model=model
                    )
        except (SQLAlchemyError, OSError) as exc:
            logger.error("record_store_upsert_failed", record_id=record_id, error=str(exc))
            raise StoreError(f"Failed to store vector for record {record_id}: {exc}") from exc
