"""
Upload validation and encoding.

Every image entering the pipeline passes through here first: the declared
MIME type must be image/*, the payload must fit the size cap and Pillow must
be able to identify it. Nothing in this module touches the network.
"""

import base64
import binascii
import io
import re
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from config.constants import ALLOWED_MIME_PREFIX, MAX_UPLOAD_BYTES
from generation.errors import UploadValidationError
from generation.models import ImagePayload


_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?;base64,", re.IGNORECASE)

# Multi-picture camera files are JPEG streams and are stored and sent as JPEG
_FORMAT_ALIASES = {"MPO": "JPEG"}

_FORMAT_EXTENSIONS = {
    "JPEG": "jpg",
    "PNG": "png",
    "WEBP": "webp",
    "GIF": "gif",
    "BMP": "bmp",
    "TIFF": "tiff",
    "HEIF": "heic",
}


def _check_declared_type(content_type: Optional[str]) -> None:
    if not content_type or not content_type.lower().startswith(ALLOWED_MIME_PREFIX):
        raise UploadValidationError(
            "Invalid file type. Please select an image file (JPEG, PNG, etc.)",
            status_code=415,
        )


def _check_size(size: int, max_bytes: int) -> None:
    if size > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise UploadValidationError(
            f"File too large. Please select an image smaller than {limit_mb:g}MB",
            status_code=413,
        )


def _identify(data: bytes) -> Tuple[str, str]:
    """Return (mime, extension) detected by Pillow from the image header."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise UploadValidationError(
            "Invalid file type. The upload is not a readable image",
            status_code=415,
        ) from e

    fmt = (fmt or "").upper()
    fmt = _FORMAT_ALIASES.get(fmt, fmt)
    mime = Image.MIME.get(fmt) or f"image/{fmt.lower()}"
    return mime, _FORMAT_EXTENSIONS.get(fmt, fmt.lower() or "img")


def validate_image(
    data: bytes,
    content_type: Optional[str],
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> ImagePayload:
    """
    Validate raw upload bytes.

    Checks run in order: declared MIME type, size, then image decoding.
    The returned payload carries the MIME type Pillow detected, not the
    declared one.

    Args:
        data: Raw file bytes
        content_type: MIME type declared by the client
        max_bytes: Size cap (inclusive)

    Raises:
        UploadValidationError: 415 for non-images, 413 for oversized files
    """
    _check_declared_type(content_type)
    _check_size(len(data), max_bytes)
    if not data:
        raise UploadValidationError("The uploaded file is empty", status_code=415)

    mime, extension = _identify(data)
    return ImagePayload(data=data, content_type=mime, extension=extension)


def decode_base64_image(
    image_base64: str,
    content_type: Optional[str] = "image/jpeg",
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> ImagePayload:
    """
    Decode and validate a base64 image sent in a JSON body.

    A leading `data:<mime>;base64,` prefix is accepted and its MIME type
    overrides `content_type`.
    """
    text = image_base64.strip()
    match = _DATA_URL_RE.match(text)
    if match:
        content_type = match.group("mime") or content_type
        text = text[match.end():]

    _check_declared_type(content_type)
    # Decoded size is at most 3/4 of the encoded length; reject early
    if (len(text) * 3) // 4 > max_bytes + 2:
        _check_size((len(text) * 3) // 4, max_bytes)

    try:
        data = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise UploadValidationError("Invalid base64 image payload", status_code=415) from e

    return validate_image(data, content_type, max_bytes=max_bytes)


def encode_image(payload: ImagePayload) -> str:
    """Base64-encode an image payload (no data: prefix)."""
    return base64.b64encode(payload.data).decode("ascii")


def to_data_url(payload: ImagePayload) -> str:
    """Encode an image payload as a data: URL for multimodal chat messages."""
    return f"data:{payload.content_type};base64,{encode_image(payload)}"
