"""
Semantic Index
In-memory snapshot index, cosine scoring and the record store it is built from
"""

from app.vectorstore.memory import IndexSnapshot, SemanticIndex
from app.vectorstore.protocol import IndexEntry, RecordStoreProtocol, SearchResult
from app.vectorstore.similarity import cosine_similarity

__all__ = [
    "IndexEntry",
    "IndexSnapshot",
    "RecordStoreProtocol",
    "SearchResult",
    "SemanticIndex",
    "cosine_similarity",
]
