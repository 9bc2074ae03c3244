"""
Database session management for the scheduling service.
"""

from app.database.async_db import (
    close_async_engine,
    get_async_db,
    get_async_db_context,
    get_async_engine,
    get_session_factory,
)

__all__ = [
    "close_async_engine",
    "get_async_db",
    "get_async_db_context",
    "get_async_engine",
    "get_session_factory",
]
