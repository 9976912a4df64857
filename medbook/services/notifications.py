"""
Notification sink for appointment events.

Delivery is best-effort: a failing notifier is logged and never fails the
request that triggered it.
"""
import logging
import smtplib
from email.message import EmailMessage
from enum import Enum
from typing import Optional

from fastapi import BackgroundTasks

from ..core.config import Settings, settings
from ..models.appointment import Appointment
from ..models.user import User

logger = logging.getLogger(__name__)

class AppointmentEvent(str, Enum):
    CREATED = "appointment_created"
    UPDATED = "appointment_updated"
    CANCELLED = "appointment_cancelled"
    STATUS_CHANGED = "appointment_status_changed"

SUBJECTS = {
    AppointmentEvent.CREATED: "New appointment request",
    AppointmentEvent.UPDATED: "Appointment updated",
    AppointmentEvent.CANCELLED: "Appointment cancelled",
    AppointmentEvent.STATUS_CHANGED: "Appointment status changed",
}

def recipient_for(event: AppointmentEvent, appointment: Appointment) -> Optional[User]:
    """Patient actions notify the doctor, doctor actions notify the patient."""
    if event == AppointmentEvent.STATUS_CHANGED:
        return appointment.patient
    return appointment.doctor

def render_body(event: AppointmentEvent, appointment: Appointment) -> str:
    patient_name = appointment.patient.name if appointment.patient else appointment.patient_id
    doctor_name = appointment.doctor.name if appointment.doctor else appointment.doctor_id
    return (
        f"{SUBJECTS[event]}\n\n"
        f"Patient: {patient_name}\n"
        f"Doctor: {doctor_name}\n"
        f"Date: {appointment.date} {appointment.time}\n"
        f"Reason: {appointment.reason}\n"
        f"Status: {appointment.status}\n"
    )

class Notifier:
    def notify(self, event: AppointmentEvent, appointment: Appointment) -> None:
        raise NotImplementedError

class LoggingNotifier(Notifier):
    """Used when no SMTP server is configured."""

    def notify(self, event: AppointmentEvent, appointment: Appointment) -> None:
        logger.info(
            f"Notification {event.value} for appointment {appointment.id} "
            f"(status={appointment.status})"
        )

class EmailNotifier(Notifier):
    """Sends mail from a background task, after the response is returned."""

    def __init__(self, config: Settings, background_tasks: Optional[BackgroundTasks] = None):
        self.config = config
        self.background_tasks = background_tasks

    def build_message(self, event: AppointmentEvent, appointment: Appointment) -> Optional[EmailMessage]:
        recipient = recipient_for(event, appointment)
        if recipient is None or not recipient.email:
            return None

        msg = EmailMessage()
        msg["From"] = self.config.EMAIL_FROM
        msg["To"] = recipient.email
        msg["Subject"] = SUBJECTS[event]
        msg.set_content(render_body(event, appointment))
        return msg

    def notify(self, event: AppointmentEvent, appointment: Appointment) -> None:
        msg = self.build_message(event, appointment)
        if msg is None:
            logger.warning(f"No recipient for {event.value} on appointment {appointment.id}")
            return

        if self.background_tasks is not None:
            self.background_tasks.add_task(self.deliver, msg, event)
        else:
            self.send(msg, event)

    def send(self, msg: EmailMessage, event: AppointmentEvent) -> None:
        with smtplib.SMTP(
            self.config.SMTP_HOST,
            self.config.SMTP_PORT,
            timeout=self.config.SMTP_TIMEOUT_SECONDS
        ) as server:
            server.ehlo()
            # Plain relays do not offer STARTTLS
            if server.has_extn("starttls"):
                server.starttls()
                server.ehlo()
            if self.config.SMTP_USER and self.config.SMTP_PASSWORD:
                server.login(self.config.SMTP_USER, self.config.SMTP_PASSWORD)
            server.send_message(msg)
        logger.info(f"Email sent to {msg['To']} for {event.value}")

    def deliver(self, msg: EmailMessage, event: AppointmentEvent) -> None:
        """Background entry point; the response is already sent, so failures are only logged."""
        try:
            self.send(msg, event)
        except Exception as e:
            logger.error(f"Failed to deliver {event.value} email to {msg['To']}: {e}")

def dispatch(notifier: Notifier, event: AppointmentEvent, appointment: Appointment) -> bool:
    """Send ``event`` through ``notifier``; return False if delivery failed."""
    try:
        notifier.notify(event, appointment)
        return True
    except Exception as e:
        logger.error(f"Failed to send {event.value} notification for appointment {appointment.id}: {e}")
        return False

def get_notifier(background_tasks: BackgroundTasks) -> Notifier:
    """Notifier dependency; email goes out after the response."""
    if settings.email_enabled:
        return EmailNotifier(settings, background_tasks)
    return LoggingNotifier()
