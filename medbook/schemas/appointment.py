from pydantic import BaseModel, Field
from typing import Optional
import datetime as dt

from ..models.appointment import AppointmentStatus

class AppointmentCreate(BaseModel):
    doctor: int = Field(..., description="Id of the doctor to book with")
    date: dt.date
    time: str = Field(..., min_length=1, max_length=50)
    reason: str = Field(..., min_length=1)
    notes: Optional[str] = None

class AppointmentUpdate(BaseModel):
    """Patient edit; absent or empty fields keep their stored value."""
    date: Optional[dt.date] = None
    time: Optional[str] = Field(None, max_length=50)
    reason: Optional[str] = None
    notes: Optional[str] = None

class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus

class PatientSummary(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None

class DoctorSummary(PatientSummary):
    specialization: Optional[str] = None

class AppointmentResponse(BaseModel):
    id: int
    patient: PatientSummary
    doctor: DoctorSummary
    date: dt.date
    time: str
    reason: str
    notes: Optional[str] = None
    status: str
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

class MessageResponse(BaseModel):
    message: str
