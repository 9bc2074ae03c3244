"""
Shared utilities module

Domain-agnostic helpers used across the application.
"""

from .logger import ColoredFormatter, JSONFormatter, setup_logging

__all__ = [
    "ColoredFormatter",
    "JSONFormatter",
    "setup_logging",
]
