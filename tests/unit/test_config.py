"""
Tests for the configuration module.
"""

import pytest
from pydantic import ValidationError


class TestSettings:
    """Tests for Settings class."""

    def test_settings_loads_from_env(self):
        """Test that settings load from environment variables."""
        from config.settings import get_settings

        settings = get_settings()

        # Required fields should be present
        assert settings.supabase_url
        assert settings.supabase_service_key

        # Defaults should be applied
        assert settings.host == "0.0.0.0"

    def test_is_development_property(self):
        """Test is_development property."""
        from config.settings import get_settings_for_testing

        for env in ["development", "dev", "local"]:
            assert get_settings_for_testing(environment=env).is_development is True

        assert get_settings_for_testing(environment="production").is_development is False

    def test_is_production_property(self):
        """Test is_production property."""
        from config.settings import get_settings_for_testing

        for env in ["production", "prod"]:
            assert get_settings_for_testing(environment=env).is_production is True

        assert get_settings_for_testing(environment="development").is_production is False

    def test_cors_origins_parsing(self):
        """Test that CORS origins can be parsed from comma-separated string."""
        from config.settings import get_settings_for_testing

        settings = get_settings_for_testing(
            cors_origins="http://localhost:3000, http://localhost:5173,",
        )

        assert settings.cors_origins == ["http://localhost:3000", "http://localhost:5173"]

    def test_settings_for_testing(self):
        """Test get_settings_for_testing function."""
        from config.settings import get_settings_for_testing

        settings = get_settings_for_testing(debug=False)

        assert settings.environment == "testing"
        assert settings.debug is False
        assert "test" in settings.supabase_url
        assert settings.supabase_jwt_secret == "test-jwt-secret"


class TestGenerationSettings:
    """Provider selection and generation defaults."""

    def test_openai_is_default_provider(self):
        from config.constants import DEFAULT_OPENAI_VISION_MODEL, OPENAI_BASE_URL
        from config.settings import get_settings_for_testing

        settings = get_settings_for_testing()

        assert settings.generation_provider == "openai"
        assert settings.generation_api_key == "test-openai-key"
        assert settings.generation_base_url == OPENAI_BASE_URL
        assert settings.describe_model == DEFAULT_OPENAI_VISION_MODEL

    def test_openrouter_provider_switches_key_url_and_model(self):
        from config.constants import DEFAULT_OPENROUTER_VISION_MODEL, OPENROUTER_BASE_URL
        from config.settings import get_settings_for_testing

        settings = get_settings_for_testing(
            generation_provider="OpenRouter",
            openrouter_api_key="or-test-key",
        )

        assert settings.generation_provider == "openrouter"
        assert settings.generation_api_key == "or-test-key"
        assert settings.generation_base_url == OPENROUTER_BASE_URL
        assert settings.describe_model == DEFAULT_OPENROUTER_VISION_MODEL

    def test_unknown_provider_rejected(self):
        from config.settings import get_settings_for_testing

        with pytest.raises(ValidationError):
            get_settings_for_testing(generation_provider="midjourney")

    def test_no_retries_and_compensation_by_default(self):
        from config.settings import get_settings_for_testing

        settings = get_settings_for_testing()

        assert settings.generation_max_retries == 0
        assert settings.compensate_failed_writes is True
        assert settings.max_upload_bytes == 5 * 1024 * 1024

    def test_retry_budget_is_bounded(self):
        from config.settings import get_settings_for_testing

        with pytest.raises(ValidationError):
            get_settings_for_testing(generation_max_retries=10)

    def test_missing_provider_key_is_empty_not_defaulted(self):
        from config.settings import get_settings_for_testing

        settings = get_settings_for_testing(openai_api_key="")

        assert settings.generation_api_key == ""


class TestConstants:
    """Tests for constants module."""

    def test_bucket_and_table_names(self):
        from config.constants import BUCKETS, TABLES

        assert BUCKETS.ORIGINAL_PHOTOS == "original-photos"
        assert BUCKETS.WARDROBES == "wardrobes"
        assert TABLES.AVATARS == "personalized_avatars"
        assert TABLES.WARDROBES == "wardrobes"

    def test_render_templates_have_placeholders(self):
        from config.constants import AVATAR_RENDER_TEMPLATE, TRY_ON_RENDER_TEMPLATE

        assert "{description}" in AVATAR_RENDER_TEMPLATE
        assert "{description}" in TRY_ON_RENDER_TEMPLATE
        assert "{avatar_url}" in TRY_ON_RENDER_TEMPLATE

    def test_feed_config_defaults(self):
        from config.constants import DEFAULT_FEED_CONFIG

        assert DEFAULT_FEED_CONFIG.DEFAULT_LIMIT <= DEFAULT_FEED_CONFIG.MAX_LIMIT
        assert DEFAULT_FEED_CONFIG.SHARE_TEXT_FALLBACK


class TestDatabase:
    """Tests for database module."""

    @pytest.mark.supabase
    def test_supabase_client_singleton(self):
        """Test that get_supabase_client returns singleton."""
        from config.database import get_supabase_client

        client1 = get_supabase_client()
        client2 = get_supabase_client()

        assert client1 is client2

    @pytest.mark.supabase
    def test_supabase_client_works(self):
        """Test that Supabase client can query database."""
        from config.constants import TABLES
        from config.database import get_supabase_client

        client = get_supabase_client()
        result = client.table(TABLES.AVATARS).select("id").limit(1).execute()

        assert result.data is not None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
