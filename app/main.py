"""
Application entry point.

All configuration, middleware, and lifecycle management is delegated
to specialized modules.
"""

import logging

import sentry_sdk

from app.config.settings import get_settings
from app.core.app_factory import create_app
from app.core.shared.logger import setup_logging

settings = get_settings()

setup_logging(settings.LOG_LEVEL, json_output=not settings.is_development)
logger = logging.getLogger(__name__)

# Error tracking is optional
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        send_default_pii=False,
        environment=settings.ENVIRONMENT,
    )

# Create application using factory
app = create_app()

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8001,
        reload=settings.DEBUG,
    )
