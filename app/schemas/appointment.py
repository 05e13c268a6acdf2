from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from ..models.appointment import AppointmentStatus
from .medical_record import RecordCreate

class AppointmentCreate(BaseModel):
    """Booking request; patient_id defaults to the caller."""
    doctor_id: str = Field(..., min_length=1)
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:MM, 24-hour")
    reason: Optional[str] = None
    patient_id: Optional[str] = None

class AppointmentComplete(BaseModel):
    """Optional medical record written as part of completing an appointment."""
    record: Optional[RecordCreate] = None

class AppointmentView(BaseModel):
    id: str
    patient_id: str
    doctor_id: str
    date: str
    time: str
    reason: Optional[str] = None
    status: AppointmentStatus
    created_at: datetime
    doctor_name: Optional[str] = None
    patient_name: Optional[str] = None

    class Config:
        from_attributes = True
