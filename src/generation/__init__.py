"""
Avatar and clothing try-on generation.

Upload validation, the shared describe -> generate -> fetch -> persist
pipeline, and the service the API routes call.
"""

from generation.errors import (
    AvatarRequiredError,
    GenerationConfigError,
    GenerationError,
    GenerationPipelineError,
    PersistenceError,
    StorageError,
    UploadValidationError,
)
from generation.models import GenerationRequest, ImagePayload
from generation.uploads import decode_base64_image, validate_image

__all__ = [
    "AvatarRequiredError",
    "GenerationConfigError",
    "GenerationError",
    "GenerationPipelineError",
    "GenerationRequest",
    "ImagePayload",
    "PersistenceError",
    "StorageError",
    "UploadValidationError",
    "decode_base64_image",
    "validate_image",
]
