"""
Embedding Indexer

Rebuilds the semantic index from the record store:
fetch all schools -> embed each one -> upsert its vector -> swap in a
fresh snapshot. The live snapshot is only replaced when the run
completes; aborted or cancelled runs leave it untouched.
"""

from __future__ import annotations

from datetime import datetime, timezone

from app.core.config import settings
from app.core.exceptions import EmbeddingRequestError, UpstreamUnavailableError
from app.llm.embedder import embed_with_timeout
from app.llm.protocol import EmbeddingServiceProtocol
from app.services.base import BaseService
from app.vectorstore.memory import IndexSnapshot, SemanticIndex
from app.vectorstore.protocol import IndexEntry, RecordStoreProtocol
from app.vectorstore.schemas import IndexFailure, IndexSummary, SchoolRecord


class EmbeddingIndexer(BaseService):
    """Single writer of a SemanticIndex."""

    def __init__(
        self,
        *,
        record_store: RecordStoreProtocol,
        embedding_service: EmbeddingServiceProtocol,
        index: SemanticIndex,
        timeout: float | None = None,
    ) -> None:
        super().__init__()
        self.record_store = record_store
        self.embedding_service = embedding_service
        self.index = index
        self.timeout = timeout if timeout is not None else settings.embedding_timeout_seconds

    async def rebuild_index(self) -> IndexSummary:
        """
        Re-embed every record and replace the live snapshot.

        Per-record failures are collected in the summary and never abort
        the run.

        Returns:
            IndexSummary with success/failure counts

        Raises:
            IndexRebuildInProgressError: If another rebuild is running
            StoreError: If the record store cannot be read or written
            UpstreamUnavailableError: If the embedding service cannot be reached
        """
        async with self.index.rebuilding():
            self._log_start("rebuild_index", model=self.embedding_service.model_name)
            try:
                return await self._rebuild()
            except Exception as exc:
                self._log_failure("rebuild_index", exc)
                raise

    async def _rebuild(self) -> IndexSummary:
        records = await self.record_store.fetch_all_records()

        entries: list[IndexEntry] = []
        failures: list[IndexFailure] = []
        dimension: int | None = None

        for record in records:
            if self.index.cancel_requested:
                return self._cancelled(len(entries), failures)

            try:
                vector = await self._embed_record(record)
            except UpstreamUnavailableError:
                raise
            except EmbeddingRequestError as exc:
                failures.append(self._record_failure(record, str(exc)))
                continue

            if dimension is None:
                dimension = len(vector)
            elif len(vector) != dimension:
                failures.append(
                    self._record_failure(
                        record,
                        f"dimension {len(vector)} differs from index dimension {dimension}",
                    )
                )
                continue

            await self.record_store.upsert_vector(
                record.id, vector, model=self.embedding_service.model_name
            )
            entries.append(IndexEntry(record_id=record.id, vector=tuple(vector), record=record))

        if self.index.cancel_requested:
            return self._cancelled(len(entries), failures)

        built_at = datetime.now(timezone.utc)
        snapshot = IndexSnapshot.build(
            entries,
            model=self.embedding_service.model_name,
            built_at=built_at,
        )
        self.index.swap(snapshot)

        summary = IndexSummary(
            succeeded=len(entries),
            failed=len(failures),
            failures=tuple(failures),
            built_at=built_at,
        )
        self._log_success(
            "rebuild_index",
            succeeded=summary.succeeded,
            failed=summary.failed,
            dimension=snapshot.dimension,
        )
        return summary

    async def _embed_record(self, record: SchoolRecord) -> list[float]:
        text = record.embedding_text()
        if not text:
            raise EmbeddingRequestError("record has no text to embed")
        return await embed_with_timeout(self.embedding_service, text, self.timeout)

    def _record_failure(self, record: SchoolRecord, reason: str) -> IndexFailure:
        self.logger.warning("record_embedding_failed", record_id=record.id, reason=reason)
        return IndexFailure(record_id=record.id, reason=reason)

    def _cancelled(self, succeeded: int, failures: list[IndexFailure]) -> IndexSummary:
        self.logger.info(
            "index_rebuild_cancelled",
            succeeded=succeeded,
            failed=len(failures),
        )
        return IndexSummary(
            succeeded=succeeded,
            failed=len(failures),
            failures=tuple(failures),
            cancelled=True,
        )
