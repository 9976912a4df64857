from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ...api.deps import get_appointment_service, get_doctor_user
from ...core.database import get_db
from ...core.exceptions import NotFoundError
from ...models.user import User
from ...schemas.appointment import AppointmentResponse, AppointmentStatusUpdate
from ...schemas.doctor import DoctorResponse
from ...services import user_directory
from ...services.appointment_service import AppointmentService
from ...services.projections import project_appointment

router = APIRouter(prefix="/doctors", tags=["Doctors"])

@router.get("", response_model=List[DoctorResponse])
async def list_doctors(db: Session = Depends(get_db)):
    """Public list of doctors."""
    return [DoctorResponse.model_validate(d) for d in user_directory.list_doctors(db)]

@router.put("/appointments/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    data: AppointmentStatusUpdate,
    current_user: User = Depends(get_doctor_user),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Confirm, complete or cancel an appointment (assigned doctor only)."""
    appointment = service.set_appointment_status(appointment_id, current_user, data.status)
    return project_appointment(appointment)

@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(doctor_id: int, db: Session = Depends(get_db)):
    doctor = user_directory.get_doctor(db, doctor_id)
    if doctor is None:
        raise NotFoundError("Doctor not found")
    return DoctorResponse.model_validate(doctor)

@router.get("/{doctor_id}/appointments", response_model=List[AppointmentResponse])
async def list_doctor_appointments(
    doctor_id: int,
    current_user: User = Depends(get_doctor_user),
    service: AppointmentService = Depends(get_appointment_service)
):
    return [project_appointment(a) for a in service.list_for_doctor(doctor_id, current_user)]
