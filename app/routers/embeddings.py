"""Semantic search router: index rebuild, search and index status"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.dependencies import (
    get_embedding_service,
    get_record_store,
    get_semantic_index,
)
from app.core.exceptions import ValidationError
from app.llm.protocol import EmbeddingServiceProtocol
from app.schemas.search import (
    CancelRebuildResponse,
    IndexFailureResponse,
    IndexStatusResponse,
    RebuildResponse,
    SearchHit,
    SearchResponse,
)
from app.services.indexing_service import EmbeddingIndexer
from app.services.search_service import SimilaritySearch
from app.vectorstore.memory import SemanticIndex
from app.vectorstore.protocol import RecordStoreProtocol


router = APIRouter(tags=["embeddings"])


def get_indexer(
    index: SemanticIndex = Depends(get_semantic_index),
    record_store: RecordStoreProtocol = Depends(get_record_store),
    embedding_service: EmbeddingServiceProtocol = Depends(get_embedding_service),
) -> EmbeddingIndexer:
    return EmbeddingIndexer(
        record_store=record_store,
        embedding_service=embedding_service,
        index=index,
    )


def get_search_service(
    index: SemanticIndex = Depends(get_semantic_index),
    embedding_service: EmbeddingServiceProtocol = Depends(get_embedding_service),
) -> SimilaritySearch:
    return SimilaritySearch(embedding_service=embedding_service, index=index)


@router.post(
    "/embeddings",
    response_model=RebuildResponse,
    summary="Rebuild the semantic index from the schools table",
)
async def rebuild_embeddings(
    indexer: EmbeddingIndexer = Depends(get_indexer),
) -> RebuildResponse:
    summary = await indexer.rebuild_index()
    return RebuildResponse(
        message="Index rebuild cancelled" if summary.cancelled else "Embeddings generated",
        count=summary.succeeded,
        failed=summary.failed,
        failures=[
            IndexFailureResponse(record_id=failure.record_id, reason=failure.reason)
            for failure in summary.failures
        ],
        cancelled=summary.cancelled,
        built_at=summary.built_at,
    )


@router.delete(
    "/embeddings/rebuild",
    response_model=CancelRebuildResponse,
    summary="Cancel the running index rebuild",
)
async def cancel_rebuild(
    index: SemanticIndex = Depends(get_semantic_index),
) -> CancelRebuildResponse:
    return CancelRebuildResponse(cancelled=index.cancel_rebuild())


@router.get(
    "/embeddings",
    response_model=SearchResponse,
    summary="Semantic search over indexed schools",
)
async def search_embeddings(
    q: Optional[str] = Query(None, description="Free-text query"),
    top_k: Optional[int] = Query(None, description="Maximum number of results"),
    service: SimilaritySearch = Depends(get_search_service),
) -> SearchResponse:
    if q is None or not q.strip():
        raise ValidationError("Missing query ?q=")

    snapshot, results = await service.search_with_snapshot(q, top_k)
    return SearchResponse(
        query=q.strip(),
        top_k=top_k or service.default_top_k,
        results=[
            SearchHit(**result.entry.record.model_dump(), score=result.score)
            for result in results
        ],
        index_built_at=snapshot.built_at,
    )


@router.get(
    "/embeddings/status",
    response_model=IndexStatusResponse,
    summary="Size and last build time of the semantic index",
)
async def index_status(
    index: SemanticIndex = Depends(get_semantic_index),
) -> IndexStatusResponse:
    snapshot = index.snapshot
    return IndexStatusResponse(
        size=len(snapshot),
        dimension=snapshot.dimension,
        model=snapshot.model,
        built_at=snapshot.built_at,
        rebuilding=index.is_rebuilding,
    )
