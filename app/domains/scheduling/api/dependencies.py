"""
Scheduling API Dependencies

Request-scoped services built by the DI container around the request's
database session.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_di_container, get_request_context
from app.core.container import DependencyContainer
from app.database.async_db import get_async_db
from app.domains.scheduling.application.dto import RequestContext
from app.domains.scheduling.application.services import (
    AppointmentLifecycle,
    BookingEngine,
    SlotStore,
    VisitRecordManager,
)

DbSession = Annotated[AsyncSession, Depends(get_async_db)]
Container = Annotated[DependencyContainer, Depends(get_di_container)]


def get_slot_store(db: DbSession, container: Container) -> SlotStore:
    return container.create_slot_store(db)


def get_booking_engine(db: DbSession, container: Container) -> BookingEngine:
    return container.create_booking_engine(db)


def get_appointment_lifecycle(db: DbSession, container: Container) -> AppointmentLifecycle:
    return container.create_appointment_lifecycle(db)


def get_visit_record_manager(db: DbSession, container: Container) -> VisitRecordManager:
    return container.create_visit_record_manager(db)


CurrentContext = Annotated[RequestContext, Depends(get_request_context)]
SlotStoreDep = Annotated[SlotStore, Depends(get_slot_store)]
BookingEngineDep = Annotated[BookingEngine, Depends(get_booking_engine)]
LifecycleDep = Annotated[AppointmentLifecycle, Depends(get_appointment_lifecycle)]
VisitRecordManagerDep = Annotated[VisitRecordManager, Depends(get_visit_record_manager)]
