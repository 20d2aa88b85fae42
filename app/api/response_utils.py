"""Shared helpers for building API response envelopes."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from fastapi import Request

from app.schemas.response import ResponseMeta

REQUEST_ID_HEADER = "X-Request-ID"


def get_request_id(request: Request) -> str:
    """Caller-supplied request id, or one generated and cached for this request."""

    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
    return request_id


def build_meta(request: Request) -> ResponseMeta:
    return ResponseMeta(requestId=get_request_id(request), timestamp=datetime.now(timezone.utc))
