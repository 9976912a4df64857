"""
Authorization gate for appointment operations.

``is_allowed`` is a pure function of the acting user, the appointment and the
requested action. ``ensure_allowed`` raises the matching domain error.
"""
from enum import Enum
from typing import Optional

from ..core.exceptions import InvalidStateError, UnauthorizedError
from ..models.appointment import Appointment, AppointmentStatus
from ..models.user import User

class AppointmentAction(str, Enum):
    READ = "read"
    CREATE = "create"
    EDIT = "edit"
    CANCEL = "cancel"
    UPDATE_STATUS = "update_status"

def _is_party(actor: User, appointment: Appointment) -> bool:
    return actor.id in (appointment.patient_id, appointment.doctor_id)

def is_allowed(
    actor: User,
    appointment: Optional[Appointment],
    action: AppointmentAction
) -> bool:
    """Decide whether ``actor`` may perform ``action`` on ``appointment``."""
    if action == AppointmentAction.CREATE:
        return actor.is_patient

    if appointment is None:
        return False

    if action == AppointmentAction.READ:
        return _is_party(actor, appointment)
    if action == AppointmentAction.EDIT:
        return (
            actor.id == appointment.patient_id
            and appointment.status == AppointmentStatus.PENDING
        )
    if action == AppointmentAction.CANCEL:
        return actor.id == appointment.patient_id
    if action == AppointmentAction.UPDATE_STATUS:
        return actor.id == appointment.doctor_id

    return False

def ensure_allowed(
    actor: User,
    appointment: Optional[Appointment],
    action: AppointmentAction
) -> None:
    """Raise ``UnauthorizedError`` or ``InvalidStateError`` when denied."""
    if is_allowed(actor, appointment, action):
        return

    # An owning patient blocked only by the status gets invalid-state
    if (
        action == AppointmentAction.EDIT
        and appointment is not None
        and actor.id == appointment.patient_id
    ):
        raise InvalidStateError("Cannot update confirmed or completed appointments")

    raise UnauthorizedError("Not authorized")
