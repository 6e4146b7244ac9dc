"""
Avatar and Try-On Routes.

Endpoints that validate an uploaded image and run the generation
pipeline, plus the reads the upload screens need.

Uploads are validated before any network call. All endpoints require
JWT authentication.
"""

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from config.settings import Settings, get_settings
from core.auth import SupabaseUser, ensure_same_user, require_auth
from core.logging import get_logger
from generation.errors import GenerationError, GenerationPipelineError
from generation.models import (
    Avatar,
    AvatarRequest,
    AvatarResponse,
    CurrentAvatarResponse,
    ImagePayload,
    TryOnRequest,
    TryOnResponse,
    WardrobeItem,
    WardrobeListResponse,
)
from generation.service import GenerationService, get_generation_service
from generation.uploads import decode_base64_image, validate_image


logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Generation"])


# =============================================================================
# Helper Functions
# =============================================================================

def _http_error(exc: GenerationPipelineError, action: str, user_id: str) -> HTTPException:
    """Translate a pipeline failure into a single user-facing error."""
    log_fields = {
        "action": action,
        "user_id": user_id,
        "error": exc.message,
        "error_type": type(exc).__name__,
    }
    if isinstance(exc, GenerationError):
        log_fields["stage"] = exc.stage
        log_fields["upstream_status"] = exc.upstream_status

    if exc.status_code >= 500:
        logger.error("Generation request failed", **log_fields)
    else:
        logger.info("Generation request rejected", **log_fields)
    return HTTPException(status_code=exc.status_code, detail=exc.message)


def _read_upload(file: UploadFile, settings: Settings) -> ImagePayload:
    # One byte past the cap is enough to detect an oversized file
    data = file.file.read(settings.max_upload_bytes + 1)
    return validate_image(data, file.content_type, max_bytes=settings.max_upload_bytes)


def _run_avatar(service: GenerationService, user_id: str, load_payload) -> AvatarResponse:
    try:
        payload = load_payload()
        avatar = service.create_avatar(user_id, payload)
    except GenerationPipelineError as e:
        raise _http_error(e, "create_avatar", user_id)
    return AvatarResponse(avatar=Avatar.model_validate(avatar))


def _run_try_on(service: GenerationService, user_id: str, load_payload, description) -> TryOnResponse:
    try:
        payload = load_payload()
        item = service.create_try_on(user_id, payload, description=description)
    except GenerationPipelineError as e:
        raise _http_error(e, "create_try_on", user_id)
    return TryOnResponse(wardrobe_item=WardrobeItem.model_validate(item))


# =============================================================================
# Avatars
# =============================================================================

@router.post("/avatars", response_model=AvatarResponse, summary="Create a personalized avatar")
def create_avatar(
    request: AvatarRequest,
    user: SupabaseUser = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
    settings: Settings = Depends(get_settings),
) -> AvatarResponse:
    """
    Create (or replace) the caller's avatar from a base64 photo.

    Body: `{imageBase64, userId?, contentType?}`.
    """
    user_id = ensure_same_user(user, request.user_id)
    return _run_avatar(
        service,
        user_id,
        lambda: decode_base64_image(
            request.image_base64, request.content_type, max_bytes=settings.max_upload_bytes
        ),
    )


@router.post("/avatars/upload", response_model=AvatarResponse, summary="Create an avatar from a file upload")
def upload_avatar(
    file: UploadFile = File(..., description="Photo of the user (image/*, max 5MB)"),
    user: SupabaseUser = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
    settings: Settings = Depends(get_settings),
) -> AvatarResponse:
    return _run_avatar(service, user.id, lambda: _read_upload(file, settings))


@router.get("/avatars/me", response_model=CurrentAvatarResponse, summary="Get the caller's avatar")
def get_my_avatar(
    user: SupabaseUser = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
) -> CurrentAvatarResponse:
    try:
        avatar = service.get_avatar(user.id)
    except GenerationPipelineError as e:
        raise _http_error(e, "get_avatar", user.id)
    return CurrentAvatarResponse(avatar=Avatar.model_validate(avatar) if avatar else None)


# =============================================================================
# Wardrobe / Try-On
# =============================================================================

@router.post("/wardrobe/try-on", response_model=TryOnResponse, summary="Try on a clothing item")
def create_try_on(
    request: TryOnRequest,
    user: SupabaseUser = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
    settings: Settings = Depends(get_settings),
) -> TryOnResponse:
    """
    Generate the caller's avatar wearing a clothing item.

    Body: `{imageBase64, description?, userId?, contentType?}`. The caller
    must already have an avatar.
    """
    user_id = ensure_same_user(user, request.user_id)
    return _run_try_on(
        service,
        user_id,
        lambda: decode_base64_image(
            request.image_base64, request.content_type, max_bytes=settings.max_upload_bytes
        ),
        request.description,
    )


@router.post("/wardrobe/try-on/upload", response_model=TryOnResponse, summary="Try on an uploaded clothing file")
def upload_try_on(
    file: UploadFile = File(..., description="Clothing item photo (image/*, max 5MB)"),
    description: str = Form(default=""),
    user: SupabaseUser = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
    settings: Settings = Depends(get_settings),
) -> TryOnResponse:
    return _run_try_on(service, user.id, lambda: _read_upload(file, settings), description)


@router.get("/wardrobe", response_model=WardrobeListResponse, summary="List the caller's wardrobe")
def list_wardrobe(
    user: SupabaseUser = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
) -> WardrobeListResponse:
    try:
        items = service.list_wardrobe(user.id)
    except GenerationPipelineError as e:
        raise _http_error(e, "list_wardrobe", user.id)
    return WardrobeListResponse(items=[WardrobeItem.model_validate(item) for item in items])
