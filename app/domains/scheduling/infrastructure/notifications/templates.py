"""
Notification templates for appointment lifecycle events.

Templates use str.format placeholders filled from the event fields plus
``clinic_name`` and a formatted ``appointment_date``.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class NotificationTemplate:
    """Subject and body of one kind of message."""

    subject_template: str
    body_template: str

    def render(self, context: dict) -> tuple[str, str]:
        return self.subject_template.format(**context), self.body_template.format(**context)


APPOINTMENT_PENDING = NotificationTemplate(
    subject_template="Request Pending | {clinic_name}",
    body_template=(
        "Dear {patient_name},\n\n"
        "We have received your appointment request for {appointment_date} at {time_range}.\n"
        "Reason: {reason}\n\n"
        "Your request is pending confirmation by the practitioner. "
        "You will receive another message once it is confirmed.\n\n"
        "{clinic_name}"
    ),
)

APPOINTMENT_CONFIRMED = NotificationTemplate(
    subject_template="Appointment Confirmed | {clinic_name}",
    body_template=(
        "Dear {patient_name},\n\n"
        "Your appointment on {appointment_date} at {time_range} has been confirmed. "
        "Please arrive 15 minutes early for registration.\n\n"
        "{clinic_name}"
    ),
)

APPOINTMENT_CANCELLED = NotificationTemplate(
    subject_template="Appointment Cancelled | {clinic_name}",
    body_template=(
        "Dear {patient_name},\n\n"
        "We regret to inform you that your appointment on {appointment_date} at {time_range} "
        "has been cancelled.\n"
        "{reason_line}\n\n"
        "{clinic_name}"
    ),
)

APPOINTMENT_COMPLETED = NotificationTemplate(
    subject_template="Appointment Completed | {clinic_name}",
    body_template=(
        "Dear {patient_name},\n\n"
        "Thank you for visiting {clinic_name}. Your consultation on {appointment_date} "
        "is marked as complete. You can view your visit report and prescription online.\n\n"
        "{clinic_name}"
    ),
)

ACCOUNT_CREATED = NotificationTemplate(
    subject_template="Your {clinic_name} account",
    body_template=(
        "Dear {patient_name},\n\n"
        "An account was created for you while booking your appointment.\n"
        "Login e-mail: {email}\n"
        "Temporary password: {generated_password}\n\n"
        "Please change your password after signing in.\n\n"
        "{clinic_name}"
    ),
)

TEMPLATES: dict[str, NotificationTemplate] = {
    "AppointmentBooked": APPOINTMENT_PENDING,
    "AppointmentConfirmed": APPOINTMENT_CONFIRMED,
    "AppointmentCancelled": APPOINTMENT_CANCELLED,
    "AppointmentCompleted": APPOINTMENT_COMPLETED,
    "PatientAccountCreated": ACCOUNT_CREATED,
}
