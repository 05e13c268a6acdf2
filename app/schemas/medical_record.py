from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional

class RecordCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    notes: str = Field(..., min_length=1)
    prescription: Optional[str] = None

    @field_validator("title", "notes")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Must not be blank")
        return v

class MedicalRecordCreate(RecordCreate):
    appointment_id: str

class MedicalRecordView(BaseModel):
    id: str
    appointment_id: str
    patient_id: str
    doctor_id: str
    title: str
    notes: str
    prescription: Optional[str] = None
    date: str
    created_at: datetime
    doctor_name: Optional[str] = None
    patient_name: Optional[str] = None

    class Config:
        from_attributes = True
