"""
Core module for cross-cutting concerns.

This module provides:
- Structured logging configuration
- Request tracing middleware
- Authentication utilities
- Common utilities
"""

from core.logging import configure_logging, get_logger
from core.auth import require_auth, SupabaseUser
from core.utils import first_row, rows, safe_get

__all__ = [
    "configure_logging",
    "get_logger",
    "require_auth",
    "SupabaseUser",
    "first_row",
    "rows",
    "safe_get",
]
