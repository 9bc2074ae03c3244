"""
Services Module

Cross-cutting services that sit outside the domain packages.
"""

from app.services.token_service import TokenService

__all__ = [
    "TokenService",
]
