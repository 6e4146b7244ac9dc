"""
Avatar and try-on generation service.

Both caller paths run the shared GenerationPipeline with their own
PipelineSpec. Also exposes the avatar / wardrobe reads the upload
screens need.
"""

from typing import Any, Dict, List, Optional

from config.constants import (
    AVATAR_DESCRIBE_PROMPT,
    AVATAR_RENDER_TEMPLATE,
    AVATAR_REQUIRED_MESSAGE,
    BUCKETS,
    DEFAULT_WARDROBE_DESCRIPTION,
    TABLES,
    TRY_ON_DESCRIBE_PROMPT,
    TRY_ON_RENDER_TEMPLATE,
)
from config.database import get_supabase_client
from config.settings import get_settings
from core.logging import LoggerMixin
from core.utils import first_row, rows
from generation.errors import AvatarRequiredError, PersistenceError
from generation.models import GenerationRequest, ImagePayload
from generation.pipeline import GenerationPipeline, PipelineSpec
from integrations.generation_client import get_generation_client
from integrations.storage import BlobStorage


AVATAR_SPEC = PipelineSpec(
    name="avatar",
    describe_prompt=AVATAR_DESCRIBE_PROMPT,
    render_template=AVATAR_RENDER_TEMPLATE,
    bucket=BUCKETS.WARDROBES,
    role="avatar",
    table=TABLES.AVATARS,
    image_field="avatar_url",
    upsert_on="user_id",
    original_field="original_photo_url",
)

TRY_ON_SPEC = PipelineSpec(
    name="try_on",
    describe_prompt=TRY_ON_DESCRIBE_PROMPT,
    render_template=TRY_ON_RENDER_TEMPLATE,
    bucket=BUCKETS.WARDROBES,
    role="tryon",
    table=TABLES.WARDROBES,
    image_field="image_url",
)


class GenerationService(LoggerMixin):
    """
    Entry points for avatar creation and clothing try-on.

    Usage:
        service = get_generation_service()
        avatar = service.create_avatar(user_id, payload)
        item = service.create_try_on(user_id, payload, description="Linen shirt")
    """

    def __init__(self, pipeline: GenerationPipeline, supabase: Any) -> None:
        self._pipeline = pipeline
        self._supabase = supabase

    # =========================================================================
    # Reads
    # =========================================================================

    def get_avatar(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Return the user's personalized avatar row, or None."""
        try:
            result = (
                self._supabase
                .table(TABLES.AVATARS)
                .select("*")
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise PersistenceError(f"Failed to load avatar: {e}", table=TABLES.AVATARS) from e
        return first_row(result)

    def list_wardrobe(self, user_id: str) -> List[Dict[str, Any]]:
        """Return the user's wardrobe items, newest first."""
        try:
            result = (
                self._supabase
                .table(TABLES.WARDROBES)
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise PersistenceError(f"Failed to load wardrobe: {e}", table=TABLES.WARDROBES) from e
        return rows(result)

    # =========================================================================
    # Generation
    # =========================================================================

    def create_avatar(self, user_id: str, image: ImagePayload) -> Dict[str, Any]:
        """
        Generate (or regenerate) the user's avatar from a photo.

        The source photo and the generated avatar are both stored; the
        avatar row is upserted on user_id so regeneration overwrites it.
        """
        self.logger.info("Creating personalized avatar", user_id=user_id)
        return self._pipeline.run(AVATAR_SPEC, GenerationRequest(user_id=user_id, image=image))

    def create_try_on(
        self,
        user_id: str,
        image: ImagePayload,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Generate the user's avatar wearing the uploaded clothing item.

        Raises:
            AvatarRequiredError: If the user has no avatar yet (no upstream call is made)
        """
        avatar = self.get_avatar(user_id)
        if not avatar or not avatar.get("avatar_url"):
            raise AvatarRequiredError(AVATAR_REQUIRED_MESSAGE)

        self.logger.info("Generating clothing try-on", user_id=user_id, avatar_id=avatar.get("id"))
        request = GenerationRequest(
            user_id=user_id,
            image=image,
            template_values={"avatar_url": avatar["avatar_url"]},
            record_fields={
                "description": (description or "").strip() or DEFAULT_WARDROBE_DESCRIPTION,
                "avatar_id": avatar.get("id"),
            },
        )
        return self._pipeline.run(TRY_ON_SPEC, request)


_generation_service: Optional[GenerationService] = None


def get_generation_service() -> GenerationService:
    """Get the generation service singleton."""
    global _generation_service
    if _generation_service is None:
        settings = get_settings()
        supabase = get_supabase_client()
        pipeline = GenerationPipeline(
            client=get_generation_client(),
            storage=BlobStorage(supabase),
            supabase=supabase,
            compensate_failed_writes=settings.compensate_failed_writes,
        )
        _generation_service = GenerationService(pipeline, supabase)
    return _generation_service
