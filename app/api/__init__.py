"""
HTTP layer: application factory, response envelope and error handlers
"""

from app.api.main import create_app

__all__ = ["create_app"]
