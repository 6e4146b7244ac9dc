"""
Pytest configuration and shared fixtures for the Fitzty API tests.
"""
import io
import os
import sys

import pytest

# Add src (and this directory, for the fakes module) to path for imports
ROOT = os.path.dirname(os.path.dirname(__file__))
sys.path.insert(0, os.path.join(ROOT, "src"))
sys.path.insert(0, os.path.dirname(__file__))

# Load environment variables
from dotenv import load_dotenv
load_dotenv(os.path.join(ROOT, ".env"))

# Settings require these; real values from .env win
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")

from fakes import FakeGenerationClient, FakeSupabase


TEST_USER_ID = "user-1"


# ============================================================================
# Fixtures: Test Data Factories
# ============================================================================

def make_image_bytes(fmt: str = "PNG", size: tuple = (8, 8), color: str = "red") -> bytes:
    """Encode a tiny solid-color image with Pillow."""
    from PIL import Image

    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes("JPEG")


@pytest.fixture
def png_payload(png_bytes):
    from generation.uploads import validate_image
    return validate_image(png_bytes, "image/png")


@pytest.fixture
def test_settings():
    from config.settings import get_settings_for_testing
    return get_settings_for_testing()


# ============================================================================
# Fixtures: Fakes
# ============================================================================

@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def fake_client() -> FakeGenerationClient:
    return FakeGenerationClient()


@pytest.fixture
def make_service(fake_supabase, fake_client):
    """Build a GenerationService over the fakes; pass compensate=False to keep orphans."""
    from generation.pipeline import GenerationPipeline
    from generation.service import GenerationService
    from integrations.storage import BlobStorage

    def _make(compensate: bool = True) -> GenerationService:
        pipeline = GenerationPipeline(
            client=fake_client,
            storage=BlobStorage(fake_supabase),
            supabase=fake_supabase,
            compensate_failed_writes=compensate,
        )
        return GenerationService(pipeline, fake_supabase)

    return _make


# ============================================================================
# Fixtures: FastAPI Test Client
# ============================================================================

@pytest.fixture
def app(fake_supabase, make_service, test_settings):
    """FastAPI application wired to in-memory fakes with a fixed caller."""
    from api.app import create_app
    from config.settings import get_settings
    from core.auth import SupabaseUser, require_auth
    from generation.service import get_generation_service
    from social.communities import CommunityService, get_community_service
    from social.competitions import CompetitionService, get_competition_service
    from social.feed import FeedService, get_feed_service

    application = create_app()
    service = make_service()
    application.dependency_overrides.update({
        require_auth: lambda: SupabaseUser(id=TEST_USER_ID, email="user-1@test.com"),
        get_settings: lambda: test_settings,
        get_generation_service: lambda: service,
        get_feed_service: lambda: FeedService(fake_supabase, settings=test_settings),
        get_community_service: lambda: CommunityService(fake_supabase),
        get_competition_service: lambda: CompetitionService(fake_supabase),
    })
    return application


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient
    return TestClient(app)


# ============================================================================
# Markers auto-use
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "supabase: marks tests that require Supabase")


# ============================================================================
# JWT Token Generation
# ============================================================================

def generate_test_jwt(
    user_id: str = TEST_USER_ID,
    exp_hours: int = 24,
    secret: str = None,
    **claims,
) -> str:
    """
    Generate a Supabase-style access token.

    Args:
        user_id: The user ID to include in the token
        exp_hours: Hours until token expires (negative for an expired token)
        secret: Signing secret (default: SUPABASE_JWT_SECRET)
        **claims: Extra or overriding claims
    """
    import time
    import jwt

    jwt_secret = secret or os.getenv("SUPABASE_JWT_SECRET")
    now = int(time.time())
    payload = {
        "sub": user_id,
        "aud": "authenticated",
        "role": "authenticated",
        "email": f"{user_id}@test.com",
        "aal": "aal1",
        "exp": now + (exp_hours * 3600),
        "iat": now,
        "is_anonymous": False,
    }
    payload.update(claims)
    return jwt.encode(payload, jwt_secret, algorithm="HS256")


@pytest.fixture
def auth_headers() -> dict:
    """Fixture providing auth headers with Bearer token."""
    return {"Authorization": f"Bearer {generate_test_jwt()}"}


# ============================================================================
# Skip conditions
# ============================================================================

def pytest_collection_modifyitems(config, items):
    """Auto-skip Supabase tests unless a real project is configured."""
    skip_supabase = pytest.mark.skip(reason="Supabase tests require credentials")
    real_supabase = os.getenv("SUPABASE_URL", "").rstrip("/") != "https://test.supabase.co"

    for item in items:
        if "supabase" in item.keywords and not real_supabase:
            item.add_marker(skip_supabase)
