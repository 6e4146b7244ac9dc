"""
FastAPI Application Factory.

Usage:
    # Development
    uvicorn api.app:create_app --factory --reload

    # Production
    uvicorn api.app:app --host 0.0.0.0 --port 8080 --workers 4

    # Or use the convenience function
    from api.app import create_app
    app = create_app()
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import get_settings
from core.logging import configure_logging, get_logger
from core.middleware import RequestTracingMiddleware


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Runs on startup:
    - Initialize logging
    - Report which generation provider is configured

    Clients (Supabase, generation provider) are created lazily on first use.
    """
    settings = get_settings()

    configure_logging(
        json_logs=settings.is_production,
        log_level="DEBUG" if settings.debug else "INFO",
    )

    logger.info(
        "Starting Fitzty API",
        environment=settings.environment,
        port=settings.port,
        generation_provider=settings.generation_provider,
    )
    if not settings.generation_api_key:
        logger.warning(
            "Generation provider has no API key; avatar and try-on requests will fail",
            generation_provider=settings.generation_provider,
        )

    yield

    logger.info("Shutting down Fitzty API")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    app = FastAPI(
        title="Fitzty API",
        description="""
        Backend for Fitzty, a social fashion app.

        ## Features

        - **Avatars**: Turn a photo into a personalized illustrated avatar
        - **Virtual Try-On**: Render your avatar wearing an uploaded clothing item
        - **Feed**: Browse, like and share outfits
        - **Communities & Competitions**: Join school/city communities and enter styling contests

        ## Main Endpoints

        - `/api/avatars` - Avatar creation and lookup
        - `/api/wardrobe` - Try-on and wardrobe listing
        - `/api/feed` - Outfit feed, likes and share links
        - `/api/communities` - Community listing and membership
        - `/api/competitions` - Active competitions and submissions

        ## Health Checks

        - `/health` - Basic health check
        - `/health/detailed` - Detailed health with dependency status
        - `/ready` - Kubernetes readiness probe
        - `/live` - Kubernetes liveness probe
        """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # =========================================================================
    # Middleware (order matters - first added = outermost)
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request tracing (adds X-Request-ID, logs timing)
    app.add_middleware(RequestTracingMiddleware)

    # =========================================================================
    # Routes
    # =========================================================================

    from api.routes.health import router as health_router
    app.include_router(health_router)

    from api.routes.generation import router as generation_router
    app.include_router(generation_router)

    from api.routes.social import router as social_router
    app.include_router(social_router)

    return app


# Create default app instance for uvicorn
# Usage: uvicorn api.app:app
app = create_app()


# Usage: gunicorn -k uvicorn.workers.UvicornWorker api.app:get_app()
def get_app() -> FastAPI:
    """Get the application instance (for ASGI servers)."""
    return app
