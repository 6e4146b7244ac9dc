"""
Application constants and generation configuration.

These are values that don't change based on environment but may need
to be tuned or referenced across the codebase.
"""

from dataclasses import dataclass


# =============================================================================
# Upstream Providers
# =============================================================================

OPENAI_BASE_URL = "https://api.openai.com/v1"
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

DEFAULT_OPENAI_VISION_MODEL = "gpt-4o"
DEFAULT_OPENROUTER_VISION_MODEL = "qwen/qwq-32b:free"
DEFAULT_IMAGE_MODEL = "dall-e-3"


# =============================================================================
# Uploads
# =============================================================================

# 5 MB
MAX_UPLOAD_BYTES = 5 * 1024 * 1024

ALLOWED_MIME_PREFIX = "image/"


# =============================================================================
# Storage Buckets & Tables
# =============================================================================

@dataclass(frozen=True)
class StorageBuckets:
    """Supabase Storage buckets written by the generation pipeline."""

    ORIGINAL_PHOTOS: str = "original-photos"
    WARDROBES: str = "wardrobes"


@dataclass(frozen=True)
class Tables:
    """Supabase tables read and written by the service."""

    AVATARS: str = "personalized_avatars"
    WARDROBES: str = "wardrobes"
    PROFILES: str = "profiles"
    LIKES: str = "likes"
    COMMENTS: str = "comments"
    FOLLOWS: str = "follows"
    COMMUNITIES: str = "communities"
    MEMBERSHIPS: str = "community_memberships"
    COMPETITIONS: str = "competitions"
    SUBMISSIONS: str = "competition_submissions"


BUCKETS = StorageBuckets()
TABLES = Tables()


# =============================================================================
# Generation Prompts
# =============================================================================

AVATAR_DESCRIBE_PROMPT = (
    "Analyze this person's photo in extreme detail. Describe their appearance "
    "including: gender, age range, hair color and style, eye color, skin tone, "
    "facial features, body type, and any distinctive characteristics. Be very "
    "specific and detailed as this description will be used to create a "
    "personalized avatar that looks like this person."
)

AVATAR_RENDER_TEMPLATE = (
    "Create a single 2D fashion avatar of a person that looks exactly like this "
    "description: {description}. The avatar should be a modern, attractive person "
    "in a clean studio setting with a neutral pose, showcasing fashion potential. "
    "Style: professional fashion photography, clean white background, good "
    "lighting, high quality. The person should look exactly like the described "
    "person. Make sure it's only one person in the image."
)

TRY_ON_DESCRIBE_PROMPT = (
    "Analyze this clothing item image in extreme detail. Describe the exact "
    "clothing item, including: type of garment, color, pattern, texture, style, "
    "fit, any logos or text, decorative elements, fabric appearance, and any "
    "unique features. Be very specific and detailed as this description will be "
    "used to recreate the exact same clothing item on an avatar."
)

TRY_ON_RENDER_TEMPLATE = (
    "Create a single 2D fashion avatar that looks exactly like the person in this "
    "reference image: {avatar_url}, but wearing this exact clothing item: "
    "{description}. The avatar should maintain the same person's appearance, "
    "facial features, hair, and body type from the reference image, but now "
    "wearing the described clothing item. Style: professional fashion "
    "photography, clean white background, good lighting. The person should be "
    "wearing the EXACT same clothing item as described while maintaining their "
    "unique appearance. Make sure it's only one person in the image."
)

DEFAULT_WARDROBE_DESCRIPTION = "AI-generated avatar wearing uploaded item"

AVATAR_REQUIRED_MESSAGE = (
    "Please create your personalized avatar first before uploading clothing items."
)


# =============================================================================
# Social
# =============================================================================

@dataclass(frozen=True)
class FeedConfig:
    """Configuration for the social feed."""

    DEFAULT_LIMIT: int = 50
    MAX_LIMIT: int = 200
    SHARE_TEXT_FALLBACK: str = "Check out this amazing fit!"


DEFAULT_FEED_CONFIG = FeedConfig()

# Profiles shown per community card
TOP_CREATORS_PER_COMMUNITY = 3

COMMUNITY_TYPES = ("school", "city")
