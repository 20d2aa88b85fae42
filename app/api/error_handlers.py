"""Common exception handlers for API responses."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.core.exceptions import (
    AppError,
    DimensionMismatchError,
    EmbeddingRequestError,
    EmbeddingTimeoutError,
    IndexRebuildInProgressError,
    LLMError,
    LLMRateLimitError,
    StoreError,
    UpstreamServiceError,
    UpstreamUnavailableError,
    ValidationError,
)
from app.core.logging import get_logger
from app.api.response_utils import build_meta
from app.schemas.response import ResponseError, ResponseEnvelope

logger = get_logger(__name__)


# Most specific classes first; lookup walks the exception's MRO.
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    IndexRebuildInProgressError: status.HTTP_409_CONFLICT,
    DimensionMismatchError: status.HTTP_409_CONFLICT,
    StoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
    EmbeddingTimeoutError: status.HTTP_504_GATEWAY_TIMEOUT,
    EmbeddingRequestError: status.HTTP_502_BAD_GATEWAY,
    UpstreamUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    UpstreamServiceError: status.HTTP_502_BAD_GATEWAY,
    LLMRateLimitError: status.HTTP_429_TOO_MANY_REQUESTS,
    LLMError: status.HTTP_502_BAD_GATEWAY,
}
DEFAULT_ERROR_CODE = "INTERNAL.UNEXPECTED"


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers that wrap exceptions in the common envelope."""

    app.add_exception_handler(AppError, _app_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_error_handler)
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)


def resolve_status_code(exc: Exception) -> int | None:
    for cls in type(exc).__mro__:
        if cls in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[cls]
    return None


def _error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Any | None = None,
    hint: str | None = None,
) -> JSONResponse:
    envelope = ResponseEnvelope[None](
        success=False,
        data=None,
        error=ResponseError(code=code, message=message, details=details, hint=hint),
        meta=build_meta(request),
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope, by_alias=True),
    )


def _compress_detail(detail: Any) -> tuple[str, Any | None]:
    if isinstance(detail, dict):
        message = detail.get("message", str(detail))
        return message, detail.get("details") or detail

    return str(detail), None


def _format_validation_message(errors: list[dict[str, Any]]) -> str:
    if not errors:
        return "Validation error"

    parts: list[str] = []
    for error in errors:
        loc = error.get("loc", [])
        msg = error.get("msg", "Validation error")
        loc_path = ".".join(str(item) for item in loc) if loc else None
        parts.append(f"{loc_path}: {msg}" if loc_path else msg)

    return "; ".join(parts)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    status_code = resolve_status_code(exc)
    if status_code is None:
        logger.error("unmapped_app_error", error=str(exc), error_type=type(exc).__name__)
        return _error_response(
            request,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code=DEFAULT_ERROR_CODE,
            message=str(exc),
        )

    if status_code >= 500:
        logger.error("request_failed", path=request.url.path, code=exc.code, error=str(exc))

    return _error_response(
        request,
        status_code=status_code,
        code=exc.code,
        message=str(exc),
        details=getattr(exc, "details", None),
        hint=getattr(exc, "hint", None),
    )


async def _request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors() or []
    return _error_response(
        request,
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="ValidationError",
        message=_format_validation_message(errors),
        details={"errors": errors},
    )


async def _http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    message, details = _compress_detail(exc.detail)
    return _error_response(
        request,
        status_code=exc.status_code,
        code=getattr(exc, "code", None) or f"HTTP.{exc.status_code}",
        message=message,
        details=details,
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return _error_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=DEFAULT_ERROR_CODE,
        message="Unexpected server error.",
    )
