"""
SQLAlchemy 2.0 Models
"""

from app.models.base import Base  # noqa: F401
from app.models.school import School, SchoolEmbedding  # noqa: F401

__all__ = [
    "Base",
    "School",
    "SchoolEmbedding",
]
