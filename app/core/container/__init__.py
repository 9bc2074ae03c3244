# ============================================================================
# SCOPE: GLOBAL
# Description: Main dependency injection container (singleton).
#              Composes the domain sub-containers.
# ============================================================================
"""
Dependency Injection Container.

Wires concrete infrastructure to the application services' ports.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import Settings
from app.core.domain.events import DomainEventPublisher
from app.domains.scheduling.application.services import (
    AppointmentLifecycle,
    BookingEngine,
    SlotStore,
    VisitRecordManager,
)

from .base import BaseContainer
from .scheduling import SchedulingContainer

logger = logging.getLogger(__name__)


class DependencyContainer:
    """
    Dependency Injection Container (Facade).

    Single Responsibility: Compose and delegate to domain-specific containers.
    """

    def __init__(self, settings: Settings | None = None):
        self._base = BaseContainer(settings)
        self._scheduling = SchedulingContainer(self._base)
        logger.info("DependencyContainer initialized")

    @property
    def settings(self) -> Settings:
        return self._base.settings

    def get_event_publisher(self) -> DomainEventPublisher:
        return self._base.get_event_publisher()

    # ==================== SCHEDULING ====================

    def create_slot_store(self, db: AsyncSession) -> SlotStore:
        return self._scheduling.create_slot_store(db)

    def create_booking_engine(self, db: AsyncSession) -> BookingEngine:
        return self._scheduling.create_booking_engine(db)

    def create_appointment_lifecycle(self, db: AsyncSession) -> AppointmentLifecycle:
        return self._scheduling.create_appointment_lifecycle(db)

    def create_visit_record_manager(self, db: AsyncSession) -> VisitRecordManager:
        return self._scheduling.create_visit_record_manager(db)


# Global container instance
_container: DependencyContainer | None = None


def get_container() -> DependencyContainer:
    """Get the global container (singleton)."""
    global _container
    if _container is None:
        _container = DependencyContainer()
    return _container


def reset_container() -> None:
    """Drop the global container (tests)."""
    global _container
    _container = None


__all__ = [
    "BaseContainer",
    "DependencyContainer",
    "SchedulingContainer",
    "get_container",
    "reset_container",
]
