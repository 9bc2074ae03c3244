"""
Database models package

Declarative base shared by the domain persistence models.
"""

from .base import Base, TimestampMixin

__all__ = [
    "Base",
    "TimestampMixin",
]
