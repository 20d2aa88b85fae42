"""
API Routers
FastAPI route handlers
"""

from app.routers import chat, embeddings, schools

__all__ = [
    "chat",
    "embeddings",
    "schools",
]
