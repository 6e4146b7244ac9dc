"""
Exceptions raised by the generation pipeline.

Each carries the HTTP status the API layer should answer with, so routes
translate them with a single handler.
"""

from typing import Optional


class GenerationPipelineError(Exception):
    """Base class for every failure that aborts a generation request."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class UploadValidationError(GenerationPipelineError, ValueError):
    """The uploaded payload is not an acceptable image. No network call was made."""

    status_code = 415


class AvatarRequiredError(GenerationPipelineError):
    """A try-on was requested by a user without a personalized avatar."""

    status_code = 409


class GenerationConfigError(GenerationPipelineError):
    """The generation provider is not configured (missing credential)."""

    status_code = 503


class GenerationError(GenerationPipelineError, RuntimeError):
    """
    An upstream describe / generate / fetch call failed.

    Attributes:
        stage: Pipeline stage that failed
        upstream_status: HTTP status returned by the upstream service, if any
    """

    status_code = 502

    def __init__(
        self,
        message: str,
        stage: str,
        upstream_status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.upstream_status = upstream_status


class StorageError(GenerationPipelineError):
    """Uploading to (or removing from) a Storage bucket failed."""

    def __init__(self, message: str, bucket: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.bucket = bucket
        self.path = path


class PersistenceError(GenerationPipelineError):
    """Writing the generated record to its table failed."""

    def __init__(self, message: str, table: str) -> None:
        super().__init__(message)
        self.table = table
