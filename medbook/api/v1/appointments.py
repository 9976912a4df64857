from fastapi import APIRouter, Depends, status
from typing import List

from ...api.deps import get_appointment_service, get_current_user, get_patient_user
from ...models.user import User
from ...schemas.appointment import (
    AppointmentCreate, AppointmentResponse, AppointmentUpdate, MessageResponse
)
from ...services.appointment_service import AppointmentService
from ...services.projections import project_appointment

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    data: AppointmentCreate,
    current_user: User = Depends(get_patient_user),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Book an appointment with a doctor (patients only)."""
    appointment = service.create_appointment(current_user, data)
    return project_appointment(appointment)

@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service)
):
    """List the caller's appointments, newest date first."""
    return [project_appointment(a) for a in service.list_for_user(current_user)]

@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service)
):
    appointment = service.get_for_user(appointment_id, current_user)
    return project_appointment(appointment)

@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    current_user: User = Depends(get_patient_user),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Edit a pending appointment (owning patient only)."""
    appointment = service.update_appointment_fields(appointment_id, current_user, data)
    return project_appointment(appointment)

@router.delete("/{appointment_id}", response_model=MessageResponse)
async def cancel_appointment(
    appointment_id: int,
    current_user: User = Depends(get_patient_user),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Cancel an appointment. The record is kept with status cancelled."""
    service.cancel_appointment(appointment_id, current_user)
    return {"message": "Appointment cancelled"}
