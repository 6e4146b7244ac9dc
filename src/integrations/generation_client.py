"""Vision + image generation client for OpenAI-compatible providers."""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional

import openai
import requests
from openai import OpenAI

from config.settings import Settings, get_settings
from core.logging import LoggerMixin
from generation.errors import GenerationConfigError, GenerationError
from generation.models import ImagePayload
from generation.uploads import to_data_url


_DOWNLOAD_HEADERS = {"User-Agent": "FitztyBot/1.0"}


class GenerationClient(LoggerMixin):
    """
    Describe, generate and download steps against OpenAI or OpenRouter.

    Both providers speak the OpenAI REST dialect, so one SDK client serves
    either; only the base URL, credential, vision model and (for OpenRouter)
    attribution headers differ. Credentials come from settings only.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[OpenAI] = None,
        http: Any = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client
        self._client_lock = threading.Lock()
        self._http = http or requests

    @property
    def provider(self) -> str:
        return self._settings.generation_provider

    def is_configured(self) -> bool:
        return bool(self._settings.generation_api_key)

    @property
    def client(self) -> OpenAI:
        """Lazy-load the SDK client."""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = self._build_client()
        return self._client

    def _build_client(self) -> OpenAI:
        settings = self._settings
        if not settings.generation_api_key:
            raise GenerationConfigError(f"{self.provider} API key not configured")

        default_headers: Dict[str, str] = {}
        if self.provider == "openrouter":
            default_headers = {
                "HTTP-Referer": settings.site_url,
                "X-Title": settings.site_name,
            }

        return OpenAI(
            api_key=settings.generation_api_key,
            base_url=settings.generation_base_url,
            timeout=settings.generation_timeout_seconds,
            max_retries=settings.generation_max_retries,
            default_headers=default_headers or None,
        )

    # ---------------------------------------------------------------------
    # Pipeline steps
    # ---------------------------------------------------------------------

    def describe(self, image: ImagePayload, prompt: str) -> str:
        """Return the vision model's free-text description of `image`."""
        try:
            response = self.client.chat.completions.create(
                model=self._settings.describe_model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            {"type": "image_url", "image_url": {"url": to_data_url(image)}},
                        ],
                    }
                ],
                max_tokens=self._settings.vision_max_tokens,
            )
        except openai.APIStatusError as e:
            raise GenerationError(
                f"Vision analysis failed: {e.status_code} - {e.message}",
                stage="describe",
                upstream_status=e.status_code,
            ) from e
        except openai.APIError as e:
            raise GenerationError(f"Vision analysis failed: {e}", stage="describe") from e

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise GenerationError("Vision analysis returned no description", stage="describe")
        return content.strip()

    def generate(self, prompt: str) -> str:
        """Request exactly one image for `prompt` and return its URL."""
        try:
            response = self.client.images.generate(
                model=self._settings.image_model,
                prompt=prompt,
                n=1,
                size=self._settings.image_size,
                quality=self._settings.image_quality,
            )
        except openai.APIStatusError as e:
            raise GenerationError(
                f"Image generation failed: {e.status_code} - {e.message}",
                stage="generate",
                upstream_status=e.status_code,
            ) from e
        except openai.APIError as e:
            raise GenerationError(f"Image generation failed: {e}", stage="generate") from e

        data = getattr(response, "data", None) or []
        url = data[0].url if data else None
        if not url:
            raise GenerationError("Image generation returned no image URL", stage="generate")
        return url

    def fetch(self, url: str) -> ImagePayload:
        """Download the generated image. No retry."""
        try:
            resp = self._http.get(
                url,
                headers=_DOWNLOAD_HEADERS,
                timeout=self._settings.download_timeout_seconds,
            )
        except requests.RequestException as e:
            raise GenerationError(f"Failed to download generated image: {e}", stage="fetch") from e

        if resp.status_code >= 400:
            raise GenerationError(
                f"Failed to download generated image ({resp.status_code})",
                stage="fetch",
                upstream_status=resp.status_code,
            )
        if not resp.content:
            raise GenerationError("Generated image download was empty", stage="fetch")

        content_type = (resp.headers.get("Content-Type") or "").split(";")[0].strip().lower()
        if not content_type.startswith("image/"):
            content_type = "image/png"
        extension = content_type.split("/", 1)[1].replace("jpeg", "jpg")
        return ImagePayload(data=resp.content, content_type=content_type, extension=extension)


_generation_client: Optional[GenerationClient] = None


def get_generation_client() -> GenerationClient:
    global _generation_client
    if _generation_client is None:
        _generation_client = GenerationClient()
    return _generation_client
