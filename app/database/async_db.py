import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from urllib.parse import quote_plus

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.config.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_async_database_url() -> str:
    """Build the asyncpg database URL, escaping credentials."""
    if not settings.DB_NAME:
        raise ValueError("Database name is required (DB_NAME)")

    encoded_user = quote_plus(settings.DB_USER)
    if settings.DB_PASSWORD:
        encoded_password = quote_plus(settings.DB_PASSWORD)
        credentials = f"{encoded_user}:{encoded_password}"
    else:
        credentials = encoded_user
    return f"postgresql+asyncpg://{credentials}@{settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME}"


def create_async_database_engine() -> AsyncEngine:
    """Create the async engine (NullPool in debug, pooled otherwise)."""
    try:
        base_config = {
            "echo": settings.DB_ECHO,
            "pool_pre_ping": True,
        }

        if settings.DEBUG:
            logger.info("Creating async database engine for DEVELOPMENT (NullPool)")
            engine_config = {**base_config, "poolclass": NullPool}
        else:
            logger.info("Creating async database engine for PRODUCTION (pooled)")
            engine_config = {
                **base_config,
                "pool_size": settings.DB_POOL_SIZE,
                "max_overflow": settings.DB_MAX_OVERFLOW,
                "pool_recycle": settings.DB_POOL_RECYCLE,
                "pool_timeout": settings.DB_POOL_TIMEOUT,
            }

        return create_async_engine(get_async_database_url(), **engine_config)

    except Exception as e:
        logger.error(f"Failed to create async database engine: {e}")
        raise


def get_async_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = create_async_database_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_async_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a session.

    Services commit through their unit of work; anything left open on
    error is rolled back here.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Async database error: {e}")
            await session.rollback()
            raise


@asynccontextmanager
async def get_async_db_context():
    """Context manager variant for code running outside a request."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Async database error: {e}")
            await session.rollback()
            raise


async def close_async_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Async database engine disposed")
    _engine = None
    _session_factory = None
