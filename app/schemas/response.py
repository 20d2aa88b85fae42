"""Common response envelope schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field


T = TypeVar("T")


class ResponseMeta(BaseModel):
    request_id: str = Field(alias="requestId")
    timestamp: datetime

    model_config = ConfigDict(populate_by_name=True)


class ResponseError(BaseModel):
    code: str
    message: str
    details: Optional[dict] = None
    hint: Optional[str] = None


class ResponseEnvelope(BaseModel, Generic[T]):
    """``{success, data, error, meta}`` wrapper used by every JSON response."""

    success: bool
    data: Optional[T] = None
    error: Optional[ResponseError] = None
    meta: ResponseMeta

    model_config = ConfigDict(populate_by_name=True)
