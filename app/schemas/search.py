"""Semantic search API schemas"""

from datetime import datetime

from pydantic import Field

from app.schemas.base import BaseSchema


class SearchHit(BaseSchema):
    id: int
    name: str
    address: str
    city: str
    state: str | None = None
    contact: str | None = None
    email_id: str | None = None
    image: str | None = None
    score: float = Field(ge=-1.0, le=1.0)


class SearchResponse(BaseSchema):
    query: str
    top_k: int
    results: list[SearchHit] = Field(default_factory=list)
    index_built_at: datetime | None = None


class IndexFailureResponse(BaseSchema):
    record_id: int
    reason: str


class RebuildResponse(BaseSchema):
    message: str
    count: int
    failed: int
    failures: list[IndexFailureResponse] = Field(default_factory=list)
    cancelled: bool = False
    built_at: datetime | None = None


class CancelRebuildResponse(BaseSchema):
    cancelled: bool


class IndexStatusResponse(BaseSchema):
    size: int
    dimension: int | None = None
    model: str | None = None
    built_at: datetime | None = None
    rebuilding: bool = False
