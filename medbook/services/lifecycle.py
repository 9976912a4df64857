"""
Appointment status transitions.

A new appointment starts ``pending``. Doctors confirm, complete or cancel it;
patients may cancel it. ``completed`` and ``cancelled`` are terminal.
"""
from typing import Dict, FrozenSet

from ..models.appointment import AppointmentStatus

TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}

def can_transition(current: str, new: str) -> bool:
    """Return True if the table allows moving from ``current`` to ``new``."""
    try:
        current_status = AppointmentStatus(current)
        new_status = AppointmentStatus(new)
    except ValueError:
        return False
    return new_status in TRANSITIONS[current_status]
