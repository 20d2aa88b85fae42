"""
Vector index DTO definitions
"""

from dataclasses import dataclass, field
from datetime import datetime

from app.schemas.base import BaseSchema

# Text fields concatenated, in this order, to build the embedding input.
EMBEDDING_TEXT_FIELDS: tuple[str, ...] = ("name", "address", "city")


class SchoolRecord(BaseSchema):
    """Read-only view of a school row as seen by the indexer."""

    id: int
    name: str
    address: str
    city: str
    state: str | None = None
    contact: str | None = None
    email_id: str | None = None
    image: str | None = None

    def embedding_text(self) -> str:
        """Join the embedding fields with single spaces, skipping blank ones."""

        parts = [(getattr(self, name) or "").strip() for name in EMBEDDING_TEXT_FIELDS]
        return " ".join(part for part in parts if part)


@dataclass(frozen=True)
class IndexFailure:
    """A record that could not be embedded during a rebuild."""

    record_id: int
    reason: str


@dataclass(frozen=True)
class IndexSummary:
    """Outcome of one rebuild run."""

    succeeded: int
    failed: int
    failures: tuple[IndexFailure, ...] = field(default_factory=tuple)
    built_at: datetime | None = None
    cancelled: bool = False
