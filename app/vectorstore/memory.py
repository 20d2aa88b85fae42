"""
In-memory semantic index

The index is an immutable snapshot behind a single reference. Rebuilds
construct a complete new snapshot and swap the reference; searches read
the reference once and work on that snapshot only.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, Sequence

import numpy as np

from app.core.exceptions import DimensionMismatchError, IndexRebuildInProgressError
from app.core.logging import get_logger
from app.vectorstore.protocol import IndexEntry
from app.vectorstore.similarity import cosine_similarities

logger = get_logger(__name__)


@dataclass(frozen=True)
class IndexSnapshot:
    """Immutable set of index entries sharing one dimensionality."""

    entries: tuple[IndexEntry, ...] = ()
    model: str | None = None
    built_at: datetime | None = None
    dimension: int | None = field(init=False, default=None)
    _matrix: np.ndarray = field(init=False, repr=False, compare=False)
    _norms: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        dimension = len(self.entries[0].vector) if self.entries else None
        for entry in self.entries:
            if len(entry.vector) != dimension:
                raise DimensionMismatchError(expected=dimension, actual=len(entry.vector))

        if self.entries:
            matrix = np.asarray([entry.vector for entry in self.entries], dtype=float)
        else:
            matrix = np.zeros((0, 0), dtype=float)
        norms = np.linalg.norm(matrix, axis=1) if self.entries else np.zeros(0)
        matrix.setflags(write=False)
        norms.setflags(write=False)

        object.__setattr__(self, "dimension", dimension)
        object.__setattr__(self, "_matrix", matrix)
        object.__setattr__(self, "_norms", norms)

    @classmethod
    def build(
        cls,
        entries: Sequence[IndexEntry],
        *,
        model: str | None = None,
        built_at: datetime | None = None,
    ) -> IndexSnapshot:
        return cls(entries=tuple(entries), model=model, built_at=built_at)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def score(self, query_vector: Sequence[float]) -> np.ndarray:
        """Cosine similarity of the query against every entry, in entry order."""

        if self.is_empty:
            return np.zeros(0)
        if len(query_vector) != self.dimension:
            raise DimensionMismatchError(expected=self.dimension, actual=len(query_vector))
        return cosine_similarities(self._matrix, self._norms, query_vector)


class SemanticIndex:
    """
    Owner of the live index snapshot.

    One instance per application (kept on ``app.state``); tests and callers
    may create as many independent instances as they need.

    - ``snapshot`` is replaced wholesale by ``swap()``, never mutated
    - at most one rebuild holds ``rebuilding()`` at a time; a second one
      is rejected with IndexRebuildInProgressError
    - ``cancel_rebuild()`` flags the running rebuild so it discards its result
    """

    def __init__(self, snapshot: IndexSnapshot | None = None) -> None:
        self._snapshot = snapshot or IndexSnapshot()
        self._rebuild_lock = asyncio.Lock()
        self._cancel_requested = False

    @property
    def snapshot(self) -> IndexSnapshot:
        return self._snapshot

    @property
    def is_rebuilding(self) -> bool:
        return self._rebuild_lock.locked()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    def swap(self, snapshot: IndexSnapshot) -> IndexSnapshot:
        """Make ``snapshot`` live and return the one it replaced."""

        previous = self._snapshot
        self._snapshot = snapshot
        logger.info(
            "index_snapshot_swapped",
            previous_size=len(previous),
            size=len(snapshot),
            dimension=snapshot.dimension,
        )
        return previous

    @asynccontextmanager
    async def rebuilding(self) -> AsyncIterator[None]:
        """Hold the single writer slot for the duration of a rebuild."""

        if self._rebuild_lock.locked():
            raise IndexRebuildInProgressError("An index rebuild is already running")

        async with self._rebuild_lock:
            self._cancel_requested = False
            try:
                yield
            finally:
                self._cancel_requested = False

    def cancel_rebuild(self) -> bool:
        """Ask the running rebuild to stop. Returns False when none is running."""

        if not self._rebuild_lock.locked():
            return False
        self._cancel_requested = True
        logger.info("index_rebuild_cancel_requested")
        return True
