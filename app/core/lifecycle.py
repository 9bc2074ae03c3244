"""
Application lifecycle management using the FastAPI lifespan pattern.

Handles startup checks and graceful shutdown only.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from app.config.settings import get_settings
from app.core.container import get_container
from app.database.async_db import close_async_engine

logger = logging.getLogger(__name__)
settings = get_settings()


class LifecycleManager:
    """Manages application startup and shutdown."""

    def __init__(self) -> None:
        self._initialized = False

    async def startup(self) -> None:
        if self._initialized:
            logger.warning("Lifecycle already initialized, skipping startup")
            return

        logger.info("Starting application lifecycle...")

        self._verify_configurations()
        self._prepare_attachment_storage()

        # Builds the event publisher and subscribes the notification dispatcher
        get_container().get_event_publisher()

        self._initialized = True
        logger.info("Application lifecycle startup completed")

    async def shutdown(self) -> None:
        if not self._initialized:
            logger.warning("Lifecycle not initialized, skipping shutdown")
            return

        logger.info("Stopping application lifecycle...")
        await close_async_engine()

        self._initialized = False
        logger.info("Application lifecycle shutdown completed")

    def _verify_configurations(self) -> None:
        if settings.JWT_SECRET_KEY == "change-me" and not settings.is_development:
            logger.warning("JWT_SECRET_KEY uses the default value outside development")

        if not settings.SMTP_HOST:
            logger.info("SMTP_HOST not configured - notifications will only be logged")

        if not settings.SENTRY_DSN:
            logger.info("SENTRY_DSN not configured - error reporting disabled")

    def _prepare_attachment_storage(self) -> None:
        attachments_dir = Path(settings.ATTACHMENTS_DIR)
        attachments_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Lab reports stored in: {attachments_dir.resolve()}")


# Global lifecycle manager instance
_lifecycle_manager: LifecycleManager | None = None


def get_lifecycle_manager() -> LifecycleManager:
    """Get or create the global lifecycle manager instance."""
    global _lifecycle_manager
    if _lifecycle_manager is None:
        _lifecycle_manager = LifecycleManager()
    return _lifecycle_manager


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Usage:
        app = FastAPI(lifespan=lifespan)
    """
    lifecycle = get_lifecycle_manager()

    await lifecycle.startup()

    yield

    await lifecycle.shutdown()
