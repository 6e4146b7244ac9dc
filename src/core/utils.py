"""
Core Utility Functions.

Helpers for reading PostgREST responses and formatting values
shared by the generation and social services.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def first_row(result: Any) -> Optional[Dict[str, Any]]:
    """
    Return the first row of a PostgREST response, or None when empty.

    Args:
        result: Response object returned by `.execute()`
    """
    data = getattr(result, "data", None)
    if isinstance(data, list):
        return data[0] if data else None
    if isinstance(data, dict):
        return data
    return None


def rows(result: Any) -> List[Dict[str, Any]]:
    """Return the rows of a PostgREST response as a list (never None)."""
    data = getattr(result, "data", None)
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return [data]
    return []


def safe_get(obj: Any, *keys: str, default: Any = None) -> Any:
    """
    Safely get nested dictionary values.

    Example:
        >>> safe_get({'profile': {'display_name': 'Ana'}}, 'profile', 'display_name')
        'Ana'
        >>> safe_get({'profile': None}, 'profile', 'display_name', default='')
        ''
    """
    current = obj
    for key in keys:
        if isinstance(current, dict):
            current = current.get(key)
        elif hasattr(current, key):
            current = getattr(current, key)
        else:
            return default
        if current is None:
            return default
    return current


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a Postgres timestamp (ISO 8601 string or datetime) as an aware datetime.

    Naive values are assumed to be UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
