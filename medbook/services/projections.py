"""
Read-side projection of appointments.

The service loads patient and doctor with an explicit join; these helpers
shape the joined rows into response models.
"""
from ..models.appointment import Appointment
from ..models.user import User
from ..schemas.appointment import AppointmentResponse, DoctorSummary, PatientSummary

def project_patient(user: User) -> PatientSummary:
    return PatientSummary(
        id=user.id,
        name=user.name,
        email=user.email,
        phone=user.phone,
    )

def project_doctor(user: User) -> DoctorSummary:
    return DoctorSummary(
        id=user.id,
        name=user.name,
        email=user.email,
        phone=user.phone,
        specialization=user.specialization,
    )

def project_appointment(appointment: Appointment) -> AppointmentResponse:
    return AppointmentResponse(
        id=appointment.id,
        patient=project_patient(appointment.patient),
        doctor=project_doctor(appointment.doctor),
        date=appointment.date,
        time=appointment.time,
        reason=appointment.reason,
        notes=appointment.notes,
        status=appointment.status,
        created_at=appointment.created_at,
        updated_at=appointment.updated_at,
    )
