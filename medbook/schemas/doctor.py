from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class DoctorResponse(BaseModel):
    """Public doctor profile; never carries the password hash."""
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    specialization: Optional[str] = None
    experience: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
