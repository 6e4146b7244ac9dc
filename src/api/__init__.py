"""
API module for FastAPI routes.

Each route module defines a FastAPI APIRouter that is mounted on the
application built by `api.app.create_app`.
"""

from api.routes import generation, health, social

__all__ = ["generation", "health", "social"]
