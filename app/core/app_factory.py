"""
Application factory for FastAPI.

Handles only FastAPI application creation and configuration.
"""

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.exception_handlers import register_exception_handlers
from app.api.middleware.logging_middleware import RequestLoggingMiddleware
from app.api.router import api_router
from app.config.settings import Settings, get_settings
from app.core.lifecycle import lifespan

logger = logging.getLogger(__name__)


class AppFactory:
    """
    Factory for creating and configuring FastAPI applications.

    Each configuration step is handled by a dedicated method.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def create_app(self) -> FastAPI:
        app = self._create_base_app()

        self._configure_middleware(app)
        self._configure_exception_handlers(app)
        self._configure_routes(app)
        self._configure_attachments(app)
        self._configure_health_endpoint(app)

        logger.info(f"Application created: {self._settings.PROJECT_NAME}")
        return app

    def _create_base_app(self) -> FastAPI:
        return FastAPI(
            title=self._settings.PROJECT_NAME,
            description=self._settings.PROJECT_DESCRIPTION,
            version=self._settings.VERSION,
            docs_url=f"{self._settings.API_V1_STR}/docs" if self._settings.DEBUG else None,
            redoc_url=f"{self._settings.API_V1_STR}/redoc" if self._settings.DEBUG else None,
            lifespan=lifespan,
        )

    def _configure_middleware(self, app: FastAPI) -> None:
        """
        Configure application middleware.

        Middleware order matters:
        1. CORS (outermost)
        2. Request logging
        """
        app.add_middleware(RequestLoggingMiddleware)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self._settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        logger.info("Middleware configured")

    def _configure_exception_handlers(self, app: FastAPI) -> None:
        register_exception_handlers(app)

    def _configure_routes(self, app: FastAPI) -> None:
        app.include_router(api_router, prefix=self._settings.API_V1_STR)
        logger.info("Routes configured")

    def _configure_attachments(self, app: FastAPI) -> None:
        """Serve stored lab reports read-only under ATTACHMENTS_PUBLIC_URL."""
        attachments_dir = Path(self._settings.ATTACHMENTS_DIR)
        attachments_dir.mkdir(parents=True, exist_ok=True)
        mount_path = self._settings.ATTACHMENTS_PUBLIC_URL.rstrip("/")
        if not mount_path.startswith("/"):
            logger.info(f"Attachments served externally from {mount_path}")
            return
        app.mount(mount_path, StaticFiles(directory=str(attachments_dir)), name="attachments")
        logger.info(f"Attachments mounted at {mount_path} from: {attachments_dir}")

    def _configure_health_endpoint(self, app: FastAPI) -> None:
        @app.get("/health", tags=["health"])
        async def health_check() -> dict[str, str]:
            """Verify application health status."""
            return {
                "status": "ok",
                "environment": self._settings.ENVIRONMENT,
            }


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create FastAPI application using the factory.

    Args:
        settings: Optional settings override

    Returns:
        Configured FastAPI application
    """
    factory = AppFactory(settings)
    return factory.create_app()
