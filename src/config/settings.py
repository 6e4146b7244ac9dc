"""
Centralized settings management using pydantic-settings.

All environment variables and configuration values are defined here.
Use get_settings() to access the singleton settings instance.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from config.constants import (
    DEFAULT_FEED_CONFIG,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_OPENAI_VISION_MODEL,
    DEFAULT_OPENROUTER_VISION_MODEL,
    MAX_UPLOAD_BYTES,
    OPENAI_BASE_URL,
    OPENROUTER_BASE_URL,
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Required environment variables:
        - SUPABASE_URL: Supabase project URL
        - SUPABASE_SERVICE_KEY: Supabase service role key
        - SUPABASE_JWT_SECRET: Secret used to verify Supabase access tokens

    Provider credentials (one is required for generation):
        - OPENAI_API_KEY: used when GENERATION_PROVIDER=openai
        - OPENROUTER_API_KEY: used when GENERATION_PROVIDER=openrouter

    Optional environment variables:
        - HOST / PORT: Server bind address (default: 0.0.0.0:8080)
        - ENVIRONMENT: Environment name (development, staging, production)
        - GENERATION_MAX_RETRIES: Upstream retry budget (default: 0)
        - COMPENSATE_FAILED_WRITES: Remove uploaded blobs when the row write fails
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")
    workers: int = Field(default=4, description="Number of uvicorn workers")

    # CORS Configuration
    cors_origins: List[str] = Field(
        default=[
            "https://fitzty.com",
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        description="Allowed CORS origins"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ==========================================================================
    # Supabase Configuration
    # ==========================================================================
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_service_key: str = Field(..., description="Supabase service role key")
    supabase_jwt_secret: str = Field(
        default="",
        description="JWT secret for token verification (from Supabase dashboard)"
    )

    # ==========================================================================
    # Site (used for share links and OpenRouter attribution headers)
    # ==========================================================================
    site_url: str = Field(default="https://fitzty.com", description="Public site URL")
    site_name: str = Field(default="Fitzty", description="Public site name")

    # ==========================================================================
    # Generation Provider
    # ==========================================================================
    generation_provider: str = Field(
        default="openai",
        description="OpenAI-compatible provider: 'openai' or 'openrouter'"
    )

    @field_validator("generation_provider", mode="before")
    @classmethod
    def parse_generation_provider(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in ("openai", "openrouter"):
                raise ValueError(f"Unsupported generation provider: {v}")
        return v

    openai_api_key: str = Field(default="", description="OpenAI API key")
    openrouter_api_key: str = Field(default="", description="OpenRouter API key")
    openai_base_url: str = Field(default=OPENAI_BASE_URL, description="OpenAI API base URL")
    openrouter_base_url: str = Field(default=OPENROUTER_BASE_URL, description="OpenRouter API base URL")

    vision_model: str = Field(
        default=DEFAULT_OPENAI_VISION_MODEL,
        description="Vision model used for the describe step (OpenAI)"
    )
    openrouter_vision_model: str = Field(
        default=DEFAULT_OPENROUTER_VISION_MODEL,
        description="Vision model used for the describe step (OpenRouter)"
    )
    image_model: str = Field(default=DEFAULT_IMAGE_MODEL, description="Image generation model")
    image_size: str = Field(default="1024x1024", description="Generated image resolution")
    image_quality: str = Field(default="standard", description="Generated image quality")
    vision_max_tokens: int = Field(default=500, ge=1, description="Token cap for descriptions")

    generation_timeout_seconds: float = Field(
        default=120.0,
        description="Timeout for each vision / image generation call (seconds)"
    )
    generation_max_retries: int = Field(
        default=0,
        ge=0,
        le=5,
        description="Retries with backoff for connection errors, 408/409/429 and 5xx"
    )
    download_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for downloading the generated image (seconds)"
    )

    @property
    def generation_api_key(self) -> str:
        if self.generation_provider == "openrouter":
            return self.openrouter_api_key
        return self.openai_api_key

    @property
    def generation_base_url(self) -> str:
        if self.generation_provider == "openrouter":
            return self.openrouter_base_url
        return self.openai_base_url

    @property
    def describe_model(self) -> str:
        if self.generation_provider == "openrouter":
            return self.openrouter_vision_model
        return self.vision_model

    # ==========================================================================
    # Uploads & Persistence
    # ==========================================================================
    max_upload_bytes: int = Field(
        default=MAX_UPLOAD_BYTES,
        ge=1,
        description="Maximum accepted image size in bytes"
    )
    compensate_failed_writes: bool = Field(
        default=True,
        description="Remove blobs uploaded by a request whose row write failed"
    )

    # ==========================================================================
    # Feed
    # ==========================================================================
    feed_default_limit: int = Field(default=DEFAULT_FEED_CONFIG.DEFAULT_LIMIT, ge=1, description="Default feed page size")
    feed_max_limit: int = Field(default=DEFAULT_FEED_CONFIG.MAX_LIMIT, ge=1, description="Maximum feed page size")


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses lru_cache to ensure only one instance is created.
    Settings are loaded from environment variables and .env file.

    Returns:
        Settings: The application settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    # Try to find .env file in project root
    env_file = Path(__file__).parent.parent.parent / ".env"
    if env_file.exists():
        os.environ.setdefault("ENV_FILE", str(env_file))

    return Settings(_env_file=env_file if env_file.exists() else None)


def get_settings_for_testing(**overrides) -> Settings:
    """
    Create a settings instance for testing with optional overrides.

    This bypasses the cache to allow different settings in tests.

    Args:
        **overrides: Setting values to override

    Returns:
        Settings: A new settings instance with overrides applied
    """
    test_defaults = {
        "supabase_url": "https://test.supabase.co",
        "supabase_service_key": "test-key",
        "supabase_jwt_secret": "test-jwt-secret",
        "openai_api_key": "test-openai-key",
        "environment": "testing",
        "debug": True,
    }
    test_defaults.update(overrides)

    return Settings(_env_file=None, **test_defaults)
