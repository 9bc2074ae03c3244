"""
Appointment Status Value Object

Lifecycle states of a booked consultation and the legal transitions
between them.
"""

from app.core.domain import StatusEnum


class AppointmentStatus(StatusEnum):
    """
    Appointment lifecycle states.

    Valid transitions:
    - SCHEDULED -> CONFIRMED, CANCELLED, COMPLETED
    - CONFIRMED -> CANCELLED, COMPLETED
    - CANCELLED -> (terminal)
    - COMPLETED -> (terminal)
    """

    SCHEDULED = "Scheduled"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"

    def allowed_transitions(self) -> tuple["AppointmentStatus", ...]:
        """Statuses reachable from this one in a single step."""
        return _TRANSITIONS[self]

    def can_transition_to(self, new_status: "AppointmentStatus") -> bool:
        """Check if transition to new status is valid."""
        return new_status in _TRANSITIONS[self]

    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return not _TRANSITIONS[self]

    def is_active(self) -> bool:
        """Active appointments hold a claim on their slot."""
        return self in (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED)


_TRANSITIONS: dict[AppointmentStatus, tuple[AppointmentStatus, ...]] = {
    AppointmentStatus.SCHEDULED: (
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.COMPLETED,
    ),
    AppointmentStatus.CONFIRMED: (
        AppointmentStatus.CANCELLED,
        AppointmentStatus.COMPLETED,
    ),
    AppointmentStatus.CANCELLED: (),
    AppointmentStatus.COMPLETED: (),
}
