"""
Pydantic models and value objects for avatar and try-on generation.

Models cover:
- Validated image payloads passed between stages
- Persisted records (personalized avatars, wardrobe items)
- API request/response schemas (camelCase on the wire)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Value Objects
# =============================================================================

@dataclass(frozen=True)
class ImagePayload:
    """Image bytes that passed upload validation."""
    data: bytes
    content_type: str
    extension: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class GenerationRequest:
    """
    One invocation of the generation pipeline.

    Attributes:
        user_id: Owner of the generated record and storage prefix
        image: Source image sent to the describe stage
        template_values: Extra placeholders for the render template
        record_fields: Extra columns written with the record
    """
    user_id: str
    image: ImagePayload
    template_values: Dict[str, str] = field(default_factory=dict)
    record_fields: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StoredBlob:
    """A blob uploaded during one pipeline run."""
    bucket: str
    path: str
    public_url: str


# =============================================================================
# Persisted Records
# =============================================================================

class Avatar(BaseModel):
    """Row of `personalized_avatars` (one per user)."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    user_id: str
    avatar_url: str
    original_photo_url: Optional[str] = None
    created_at: Optional[datetime] = None


class WardrobeItem(BaseModel):
    """Row of `wardrobes` (one per successful try-on)."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    user_id: str
    image_url: str
    description: Optional[str] = None
    avatar_id: Optional[str] = None
    created_at: Optional[datetime] = None


# =============================================================================
# API Schemas
# =============================================================================

class AvatarRequest(BaseModel):
    """JSON body for avatar creation: `{imageBase64, userId}`."""
    model_config = ConfigDict(populate_by_name=True)

    image_base64: str = Field(..., alias="imageBase64", min_length=1, description="Base64 image, no data: prefix required")
    user_id: Optional[str] = Field(default=None, alias="userId", description="Must match the token subject when sent")
    content_type: str = Field(default="image/jpeg", alias="contentType", description="Declared MIME type")


class TryOnRequest(AvatarRequest):
    """JSON body for clothing try-on: `{imageBase64, description, userId}`."""

    description: Optional[str] = Field(default=None, max_length=2000, description="Optional caption for the wardrobe item")


class AvatarResponse(BaseModel):
    success: bool = True
    avatar: Avatar


class CurrentAvatarResponse(BaseModel):
    avatar: Optional[Avatar] = None


class TryOnResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    wardrobe_item: WardrobeItem = Field(..., alias="wardrobeItem")


class WardrobeListResponse(BaseModel):
    items: List[WardrobeItem]
