"""
Notification Dispatcher.

Turns appointment lifecycle events into templated messages for the patient.

Usage:
    publisher = DomainEventPublisher()
    dispatcher = NotificationDispatcher(sender=LoggingMessageSender(), clinic_name="MediCare")
    dispatcher.register(publisher)
"""

import logging
from datetime import date
from typing import Any

from app.core.domain import DomainEvent, DomainEventPublisher
from app.domains.scheduling.domain.events import (
    AppointmentBooked,
    AppointmentCancelled,
    AppointmentCompleted,
    AppointmentConfirmed,
    PatientAccountCreated,
)

from .message_sender import IMessageSender, OutgoingMessage
from .templates import TEMPLATES

logger = logging.getLogger(__name__)

HANDLED_EVENTS: tuple[type[DomainEvent], ...] = (
    AppointmentBooked,
    AppointmentConfirmed,
    AppointmentCancelled,
    AppointmentCompleted,
    PatientAccountCreated,
)


class NotificationDispatcher:
    """
    Consumes lifecycle events and sends one message per event.

    Delivery errors propagate to the publisher, which logs them without
    affecting the request that produced the event.
    """

    def __init__(self, sender: IMessageSender, clinic_name: str = "MediCare"):
        self._sender = sender
        self._clinic_name = clinic_name

    def register(self, publisher: DomainEventPublisher) -> None:
        for event_type in HANDLED_EVENTS:
            publisher.subscribe(event_type, self.handle)

    async def handle(self, event: DomainEvent) -> None:
        template = TEMPLATES.get(event.event_type)
        if template is None:
            logger.debug(f"No template for {event.event_type}, skipping")
            return

        context = self._build_context(event)
        recipient = context.get("email") or context.get("patient_email")
        if not recipient:
            logger.warning(f"{event.event_type} {event.event_id} has no recipient, skipping")
            return

        subject, body = template.render(context)
        await self._sender.send(OutgoingMessage(to=recipient, subject=subject, body=body))
        logger.info(f"Dispatched {event.event_type} notification {event.event_id}")

    def _build_context(self, event: DomainEvent) -> dict[str, Any]:
        context: dict[str, Any] = dict(event.__dict__)
        context["clinic_name"] = self._clinic_name

        appointment_date = context.get("appointment_date")
        if isinstance(appointment_date, date):
            context["appointment_date"] = appointment_date.strftime("%A, %B %d, %Y")

        if isinstance(event, AppointmentCancelled):
            context["reason_line"] = (
                f"Reason: {event.reason}" if event.reason else "Please visit our portal to reschedule."
            )
        return context
