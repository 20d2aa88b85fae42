"""
Core module: settings, logging, exceptions and database plumbing
"""

from app.core.config import settings
from app.core.exceptions import AppError
from app.core.logging import configure_logging, get_logger

__all__ = ["settings", "AppError", "configure_logging", "get_logger"]
