"""Exceptions raised by the social services."""

from typing import Any, Optional


class SocialError(Exception):
    """Base class; carries the HTTP status for the API layer."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(SocialError):
    status_code = 404


class CompetitionClosedError(SocialError):
    """Submission outside the competition's time window, or competition inactive."""
    status_code = 409


class CompetitionFullError(SocialError):
    status_code = 409


class DuplicateSubmissionError(SocialError):
    status_code = 409


# PostgreSQL unique_violation, surfaced by PostgREST as the error code
UNIQUE_VIOLATION = "23505"


class SocialStoreError(SocialError):
    """A database request failed or returned nothing where a row was expected."""

    status_code = 500

    def __init__(self, message: str, table: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.table = table
        self.code = code

    @property
    def is_unique_violation(self) -> bool:
        return self.code == UNIQUE_VIOLATION


def execute_query(query: Any, table: str) -> Any:
    """Run a supabase query, re-raising client failures as SocialStoreError."""
    try:
        return query.execute()
    except Exception as e:
        raise SocialStoreError(
            f"Database request failed on {table}",
            table=table,
            code=getattr(e, "code", None),
        ) from e
