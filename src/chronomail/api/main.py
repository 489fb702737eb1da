"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from chronomail.domain.errors import StorageError
from chronomail.infrastructure import get_settings
from chronomail.infrastructure.http.dependencies import get_notification_ledger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    try:
        settings.email_dir.mkdir(parents=True, exist_ok=True)
        get_notification_ledger().ensure_exists()
        logger.info(f"Ledger at {settings.notifications_file}, archive at {settings.email_dir}")
    except (OSError, StorageError) as e:
        logger.warning(f"Data directory setup failed (non-fatal): {e}")

    if not settings.google_refresh_token:
        logger.warning("GOOGLE_REFRESH_TOKEN not set; visit /auth/google to obtain one")

    yield

    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Gmail automation: send mail and archive newly arrived messages from push notifications",
        lifespan=lifespan,
    )

    # Register routes
    from chronomail.api.routes import router
    from chronomail.infrastructure.http.auth_routes import router as auth_router
    from chronomail.infrastructure.http.email_routes import router as email_router
    from chronomail.infrastructure.http.pubsub_ingest import router as pubsub_router
    from chronomail.infrastructure.http.setup_routes import router as setup_router

    app.include_router(router)
    app.include_router(email_router)
    app.include_router(auth_router)
    app.include_router(pubsub_router)
    app.include_router(setup_router)

    return app


# Create app instance
app = create_app()
