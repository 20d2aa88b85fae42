"""
Vector index contracts

Defines the record store collaborator and the value types shared by the
indexer and the similarity search.
"""

from typing import NamedTuple, Protocol, Sequence

from app.vectorstore.schemas import SchoolRecord


class IndexEntry(NamedTuple):
    """
    Single in-memory index entry

    Attributes:
        record_id: School primary key
        vector: Embedding vector (immutable)
        record: Full school record, returned to search callers
    """

    record_id: int
    vector: tuple[float, ...]
    record: SchoolRecord


class SearchResult(NamedTuple):
    """
    Single similarity search hit

    Attributes:
        entry: Matched index entry
        score: Cosine similarity in [-1, 1], higher is more similar
    """

    entry: IndexEntry
    score: float


class RecordStoreProtocol(Protocol):
    """
    Protocol for the relational store feeding the indexer

    Implementations must raise StoreError when the store is unreachable.
    """

    async def fetch_all_records(self) -> list[SchoolRecord]:
        """
        Fetch every school currently registered

        Returns:
            Records ordered by id

        Raises:
            StoreError: If the store cannot be reached
        """
        ...

    async def upsert_vector(
        self,
        record_id: int,
        vector: Sequence[float],
        model: str | None = None,
    ) -> None:
        """
        Persist a vector for a record, replacing any previous one

        Args:
            record_id: School primary key
            vector: Embedding vector
            model: Name of the embedding model that produced the vector

        Raises:
            StoreError: If the write fails
        """
        ...
