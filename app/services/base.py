"""
Service Layer Base Class

Common structured logging helpers shared by every service.
Services never see FastAPI Request/Response objects; they take and
return schemas or domain types and raise AppError subclasses.
"""

from __future__ import annotations

from typing import Any

from app.core.logging import get_logger


class BaseService:
    """
    Base class providing a per-service logger and standard
    start/success/failure log events.
    """

    def __init__(self) -> None:
        self.logger = get_logger(self.__class__.__name__)

    def _log_start(self, operation: str, **context: Any) -> None:
        self.logger.info("service_operation_start", operation=operation, **context)

    def _log_success(self, operation: str, **context: Any) -> None:
        self.logger.info("service_operation_success", operation=operation, **context)

    def _log_failure(self, operation: str, error: Exception, **context: Any) -> None:
        self.logger.error(
            "service_operation_failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            **context,
        )
