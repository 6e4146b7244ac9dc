"""
Route modules for the API.

Each module exports a FastAPI APIRouter with endpoints
for a specific domain/feature.
"""

from api.routes import generation
from api.routes import health
from api.routes import social

__all__ = ["generation", "health", "social"]
