from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
import logging

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import (
    InvalidInputError, InvalidStateError, NotFoundError, UnauthorizedError
)
from ..models.appointment import Appointment, AppointmentStatus
from ..models.user import User
from ..schemas.appointment import AppointmentCreate, AppointmentUpdate
from .authorization import AppointmentAction, ensure_allowed
from .lifecycle import can_transition
from .notifications import AppointmentEvent, LoggingNotifier, Notifier, dispatch
from .user_directory import get_doctor

logger = logging.getLogger(__name__)

class AppointmentService:
    """Appointment lifecycle: booking, patient edits, cancellation and doctor status changes."""

    def __init__(
        self,
        db: Session,
        notifier: Optional[Notifier] = None,
        config: Optional[Settings] = None
    ):
        self.db = db
        self.notifier = notifier or LoggingNotifier()
        self.config = config or default_settings

    # Queries
    def _query(self):
        """Appointments with both parties joined in for projection."""
        return self.db.query(Appointment).options(
            joinedload(Appointment.patient),
            joinedload(Appointment.doctor)
        )

    def _get_or_404(self, appointment_id: int) -> Appointment:
        appointment = self._query().filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    def _ordered(self, query):
        return query.order_by(Appointment.date.desc(), Appointment.id.desc())

    def list_for_user(self, actor: User) -> List[Appointment]:
        """Appointments where the caller is the patient, or the doctor for doctors."""
        query = self._query()
        if actor.is_doctor:
            query = query.filter(Appointment.doctor_id == actor.id)
        else:
            query = query.filter(Appointment.patient_id == actor.id)
        return self._ordered(query).all()

    def get_for_user(self, appointment_id: int, actor: User) -> Appointment:
        appointment = self._get_or_404(appointment_id)
        ensure_allowed(actor, appointment, AppointmentAction.READ)
        return appointment

    def list_for_doctor(self, doctor_id: int, actor: User) -> List[Appointment]:
        if actor.id != doctor_id:
            logger.warning(f"Doctor {actor.id} denied access to appointments of doctor {doctor_id}")
            raise UnauthorizedError("Not authorized")
        query = self._query().filter(Appointment.doctor_id == doctor_id)
        return self._ordered(query).all()

    # Mutations
    def create_appointment(self, actor: User, data: AppointmentCreate) -> Appointment:
        """Book a pending appointment for ``actor`` with the requested doctor."""
        ensure_allowed(actor, None, AppointmentAction.CREATE)

        doctor = get_doctor(self.db, data.doctor)
        if doctor is None:
            logger.warning(f"Patient {actor.id} tried to book with invalid doctor {data.doctor}")
            raise InvalidInputError("Invalid doctor")

        appointment = Appointment(
            patient_id=actor.id,
            doctor_id=doctor.id,
            date=data.date,
            time=data.time,
            reason=data.reason,
            notes=data.notes,
            status=AppointmentStatus.PENDING.value
        )
        self.db.add(appointment)
        self.db.commit()

        appointment = self._get_or_404(appointment.id)
        logger.info(f"Appointment {appointment.id} booked by patient {actor.id} with doctor {doctor.id}")
        dispatch(self.notifier, AppointmentEvent.CREATED, appointment)
        return appointment

    def update_appointment_fields(
        self,
        appointment_id: int,
        actor: User,
        data: AppointmentUpdate
    ) -> Appointment:
        """Overwrite the supplied fields of a pending appointment."""
        appointment = self._get_or_404(appointment_id)
        ensure_allowed(actor, appointment, AppointmentAction.EDIT)

        # Empty values keep what is stored
        appointment.date = data.date or appointment.date
        appointment.time = data.time or appointment.time
        appointment.reason = data.reason or appointment.reason
        appointment.notes = data.notes or appointment.notes

        self.db.commit()

        appointment = self._get_or_404(appointment_id)
        logger.info(f"Appointment {appointment_id} updated by patient {actor.id}")
        dispatch(self.notifier, AppointmentEvent.UPDATED, appointment)
        return appointment

    def cancel_appointment(self, appointment_id: int, actor: User) -> Appointment:
        appointment = self._get_or_404(appointment_id)
        ensure_allowed(actor, appointment, AppointmentAction.CANCEL)

        if appointment.status == AppointmentStatus.CANCELLED:
            logger.info(f"Appointment {appointment_id} already cancelled")
            return appointment

        if (
            appointment.status == AppointmentStatus.COMPLETED
            and not self.config.ALLOW_CANCEL_COMPLETED
        ):
            raise InvalidStateError("Cannot cancel a completed appointment")

        appointment.status = AppointmentStatus.CANCELLED.value
        self.db.commit()

        appointment = self._get_or_404(appointment_id)
        logger.info(f"Appointment {appointment_id} cancelled by patient {actor.id}")
        dispatch(self.notifier, AppointmentEvent.CANCELLED, appointment)
        return appointment

    def set_appointment_status(
        self,
        appointment_id: int,
        actor: User,
        new_status: str
    ) -> Appointment:
        """Apply a doctor's status change.

        With ``ENFORCE_STATUS_TRANSITIONS`` disabled any known status is
        written regardless of the current one.
        """
        appointment = self._get_or_404(appointment_id)
        ensure_allowed(actor, appointment, AppointmentAction.UPDATE_STATUS)

        try:
            target = AppointmentStatus(new_status)
        except ValueError:
            raise InvalidInputError(f"Unknown appointment status: {new_status}")

        current = appointment.status
        if self.config.ENFORCE_STATUS_TRANSITIONS and not can_transition(current, target):
            logger.warning(
                f"Doctor {actor.id} attempted {current} -> {target.value} on appointment {appointment_id}"
            )
            raise InvalidStateError(f"Cannot change status from {current} to {target.value}")

        appointment.status = target.value
        self.db.commit()

        appointment = self._get_or_404(appointment_id)
        logger.info(f"Appointment {appointment_id} status {current} -> {target.value} by doctor {actor.id}")
        dispatch(self.notifier, AppointmentEvent.STATUS_CHANGED, appointment)
        return appointment
