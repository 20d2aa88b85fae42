"""
Unit tests for EmbeddingIndexer
"""

import asyncio

import pytest

from app.core.exceptions import (
    EmbeddingRequestError,
    IndexRebuildInProgressError,
    StoreError,
    UpstreamUnavailableError,
)
from app.services.indexing_service import EmbeddingIndexer
from app.vectorstore.memory import IndexSnapshot, SemanticIndex
from app.vectorstore.protocol import IndexEntry
from app.vectorstore.schemas import SchoolRecord


def _record(record_id: int, name: str, city: str = "Springfield") -> SchoolRecord:
    return SchoolRecord(id=record_id, name=name, address=f"{record_id} Main St", city=city)


class InMemoryRecordStore:
    """Record store stub that keeps upserted vectors in a dict."""

    def __init__(self, records: list[SchoolRecord]) -> None:
        self.records = records
        self.vectors: dict[int, list[float]] = {}
        self.fail_fetch = False
        self.fail_upsert_for: set[int] = set()

    async def fetch_all_records(self) -> list[SchoolRecord]:
        if self.fail_fetch:
            raise StoreError("connection refused")
        return list(self.records)

    async def upsert_vector(self, record_id, vector, model=None) -> None:
        if record_id in self.fail_upsert_for:
            raise StoreError("write failed")
        self.vectors[record_id] = list(vector)


class ScriptedEmbeddingService:
    """Embeds text by length; texts containing a marker fail or block."""

    model_name = "scripted"

    def __init__(self) -> None:
        self.fail_on: set[str] = set()
        self.unavailable_on: set[str] = set()
        self.block_on: set[str] = set()
        self.gate = asyncio.Event()
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if any(marker in text for marker in self.unavailable_on):
            raise UpstreamUnavailableError("connection refused")
        if any(marker in text for marker in self.fail_on):
            raise EmbeddingRequestError("bad input")
        if any(marker in text for marker in self.block_on):
            await self.gate.wait()
        return [float(len(text)), 1.0, 0.0]

    async def aclose(self) -> None:
        return None


def _old_snapshot() -> IndexSnapshot:
    entry = IndexEntry(record_id=99, vector=(1.0, 1.0, 1.0), record=_record(99, "Old School"))
    return IndexSnapshot.build([entry], model="old")


@pytest.fixture
def index() -> SemanticIndex:
    return SemanticIndex()


@pytest.fixture
def embedder() -> ScriptedEmbeddingService:
    return ScriptedEmbeddingService()


def _indexer(store, embedder, index) -> EmbeddingIndexer:
    return EmbeddingIndexer(
        record_store=store,
        embedding_service=embedder,
        index=index,
        timeout=1.0,
    )


@pytest.mark.asyncio
async def test_rebuild_with_no_records_yields_empty_index(index, embedder):
    store = InMemoryRecordStore([])

    summary = await _indexer(store, embedder, index).rebuild_index()

    assert summary.succeeded == 0
    assert summary.failed == 0
    assert len(index.snapshot) == 0
    assert index.snapshot.built_at is not None


@pytest.mark.asyncio
async def test_rebuild_embeds_fields_in_order_and_upserts(index, embedder):
    store = InMemoryRecordStore([_record(1, "Lincoln High")])

    summary = await _indexer(store, embedder, index).rebuild_index()

    assert summary.succeeded == 1
    assert embedder.calls == ["Lincoln High 1 Main St Springfield"]
    assert store.vectors[1] == [float(len(embedder.calls[0])), 1.0, 0.0]
    assert index.snapshot.model == "scripted"
    assert index.snapshot.dimension == 3


@pytest.mark.asyncio
async def test_one_of_three_failing_is_skipped(index, embedder):
    store = InMemoryRecordStore(
        [_record(1, "Alpha"), _record(2, "Broken"), _record(3, "Gamma")]
    )
    embedder.fail_on.add("Broken")

    summary = await _indexer(store, embedder, index).rebuild_index()

    assert summary.succeeded == 2
    assert summary.failed == 1
    assert summary.failures[0].record_id == 2
    assert sorted(entry.record_id for entry in index.snapshot.entries) == [1, 3]
    assert 2 not in store.vectors


@pytest.mark.asyncio
async def test_record_without_text_is_a_failure(index, embedder):
    blank = SchoolRecord(id=4, name=" ", address="", city="")
    store = InMemoryRecordStore([blank, _record(5, "Delta")])

    summary = await _indexer(store, embedder, index).rebuild_index()

    assert summary.succeeded == 1
    assert summary.failed == 1
    assert summary.failures[0].record_id == 4


@pytest.mark.asyncio
async def test_store_failure_keeps_previous_snapshot(embedder):
    previous = _old_snapshot()
    index = SemanticIndex(previous)
    store = InMemoryRecordStore([_record(1, "Alpha")])
    store.fail_fetch = True

    with pytest.raises(StoreError):
        await _indexer(store, embedder, index).rebuild_index()

    assert index.snapshot is previous
    assert not index.is_rebuilding


@pytest.mark.asyncio
async def test_upsert_failure_aborts_without_swap(embedder):
    previous = _old_snapshot()
    index = SemanticIndex(previous)
    store = InMemoryRecordStore([_record(1, "Alpha"), _record(2, "Beta")])
    store.fail_upsert_for.add(2)

    with pytest.raises(StoreError):
        await _indexer(store, embedder, index).rebuild_index()

    assert index.snapshot is previous


@pytest.mark.asyncio
async def test_unreachable_embedding_service_aborts_without_swap(embedder):
    previous = _old_snapshot()
    index = SemanticIndex(previous)
    store = InMemoryRecordStore([_record(1, "Alpha"), _record(2, "Down")])
    embedder.unavailable_on.add("Down")

    with pytest.raises(UpstreamUnavailableError):
        await _indexer(store, embedder, index).rebuild_index()

    assert index.snapshot is previous


@pytest.mark.asyncio
async def test_slow_embedding_times_out_as_record_failure(index, embedder):
    store = InMemoryRecordStore([_record(1, "Slow"), _record(2, "Fast")])
    embedder.block_on.add("Slow")
    indexer = EmbeddingIndexer(
        record_store=store,
        embedding_service=embedder,
        index=index,
        timeout=0.01,
    )

    summary = await indexer.rebuild_index()

    assert summary.succeeded == 1
    assert summary.failed == 1
    assert "timed out" in summary.failures[0].reason


@pytest.mark.asyncio
async def test_concurrent_rebuild_is_rejected(index, embedder):
    store = InMemoryRecordStore([_record(1, "Slow")])
    embedder.block_on.add("Slow")
    indexer = EmbeddingIndexer(
        record_store=store,
        embedding_service=embedder,
        index=index,
        timeout=5.0,
    )

    first = asyncio.create_task(indexer.rebuild_index())
    while not embedder.calls:
        await asyncio.sleep(0)

    assert index.is_rebuilding
    with pytest.raises(IndexRebuildInProgressError):
        await indexer.rebuild_index()

    embedder.gate.set()
    summary = await first
    assert summary.succeeded == 1
    assert not index.is_rebuilding


@pytest.mark.asyncio
async def test_cancelled_rebuild_discards_result(embedder):
    previous = _old_snapshot()
    index = SemanticIndex(previous)
    store = InMemoryRecordStore([_record(1, "Slow"), _record(2, "Beta")])
    embedder.block_on.add("Slow")
    indexer = EmbeddingIndexer(
        record_store=store,
        embedding_service=embedder,
        index=index,
        timeout=5.0,
    )

    task = asyncio.create_task(indexer.rebuild_index())
    while not embedder.calls:
        await asyncio.sleep(0)

    assert index.cancel_rebuild() is True
    embedder.gate.set()
    summary = await task

    assert summary.cancelled is True
    assert summary.built_at is None
    assert index.snapshot is previous
    assert not index.cancel_requested


def test_cancel_without_running_rebuild_returns_false(index):
    assert index.cancel_rebuild() is False


class GrowingEmbeddingService:
    """First call returns a 2-d vector, later calls 3-d."""

    model_name = "growing"

    def __init__(self) -> None:
        self.calls = 0

    async def embed(self, text: str) -> list[float]:
        self.calls += 1
        return [1.0, 0.5] if self.calls == 1 else [1.0, 0.5, 0.25]

    async def aclose(self) -> None:
        return None


@pytest.mark.asyncio
async def test_vector_with_different_dimension_is_a_failure(index):
    store = InMemoryRecordStore([_record(1, "Alpha"), _record(2, "Beta")])

    summary = await _indexer(store, GrowingEmbeddingService(), index).rebuild_index()

    assert summary.succeeded == 1
    assert summary.failed == 1
    assert summary.failures[0].record_id == 2
    assert "dimension 3" in summary.failures[0].reason
    assert index.snapshot.dimension == 2
    assert [entry.record_id for entry in index.snapshot.entries] == [1]
    assert 2 not in store.vectors


@pytest.mark.asyncio
async def test_cancelled_task_keeps_snapshot_and_releases_lock(embedder):
    previous = _old_snapshot()
    index = SemanticIndex(previous)
    store = InMemoryRecordStore(
        [_record(1, "Alpha"), _record(2, "Slow"), _record(3, "Gamma"), _record(4, "Delta")]
    )
    embedder.block_on.add("Slow")
    indexer = EmbeddingIndexer(
        record_store=store,
        embedding_service=embedder,
        index=index,
        timeout=5.0,
    )

    task = asyncio.create_task(indexer.rebuild_index())
    while len(embedder.calls) < 2:
        await asyncio.sleep(0)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert index.snapshot is previous
    assert not index.is_rebuilding

    embedder.gate.set()
    summary = await indexer.rebuild_index()

    assert summary.succeeded == 4
    assert index.snapshot is not previous
    assert len(index.snapshot) == 4
