"""
Similarity Search over the semantic index
"""

from __future__ import annotations

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.core.logging import measure_latency
from app.llm.embedder import embed_with_timeout
from app.llm.protocol import EmbeddingServiceProtocol
from app.services.base import BaseService
from app.vectorstore.memory import IndexSnapshot, SemanticIndex
from app.vectorstore.protocol import SearchResult
from app.vectorstore.similarity import rank_top_k


class SimilaritySearch(BaseService):
    """
    Read-only ranking of indexed schools against a free-text query.

    Each call reads the index reference once, so a rebuild swapping the
    snapshot mid-query never mixes entries from two snapshots.
    """

    def __init__(
        self,
        *,
        embedding_service: EmbeddingServiceProtocol,
        index: SemanticIndex,
        timeout: float | None = None,
        default_top_k: int | None = None,
    ) -> None:
        super().__init__()
        self.embedding_service = embedding_service
        self.index = index
        self.timeout = timeout if timeout is not None else settings.embedding_timeout_seconds
        self.default_top_k = default_top_k or settings.search_top_k

    async def search(self, query_text: str, top_k: int | None = None) -> list[SearchResult]:
        """Top-K most similar records for ``query_text`` (see search_with_snapshot)."""

        _, results = await self.search_with_snapshot(query_text, top_k)
        return results

    @measure_latency("similarity_search")
    async def search_with_snapshot(
        self,
        query_text: str,
        top_k: int | None = None,
    ) -> tuple[IndexSnapshot, list[SearchResult]]:
        """
        Top-K most similar records for ``query_text``.

        Args:
            query_text: Free-text query, non-empty after trimming
            top_k: Maximum number of results (default from settings)

        Returns:
            The snapshot that was searched, and its results ordered by
            descending score (ties by ascending record id); no results when
            the index is empty

        Raises:
            ValidationError: If the query is blank or top_k < 1
            UpstreamServiceError: If embedding the query fails
            DimensionMismatchError: If the query vector does not match the index
        """
        query = (query_text or "").strip()
        if not query:
            raise ValidationError("Query text must not be empty")

        top_k = self.default_top_k if top_k is None else top_k
        if top_k < 1:
            raise ValidationError("top_k must be >= 1")

        snapshot = self.index.snapshot
        if snapshot.is_empty:
            self.logger.debug("search_on_empty_index", query_length=len(query))
            return snapshot, []

        query_vector = await embed_with_timeout(self.embedding_service, query, self.timeout)
        scores = snapshot.score(query_vector)
        results = rank_top_k(snapshot.entries, scores, top_k)

        self.logger.debug(
            "search_completed",
            query_length=len(query),
            index_size=len(snapshot),
            top_k=top_k,
            returned=len(results),
        )
        return snapshot, results
