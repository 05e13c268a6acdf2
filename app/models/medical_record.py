from sqlalchemy import Column, String, DateTime, Text, Index
from datetime import datetime, timezone
import uuid

from ..core.database import Base

class MedicalRecord(Base):
    __tablename__ = "medical_records"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    appointment_id = Column(String(36), nullable=False)
    patient_id = Column(String(64), nullable=False)
    doctor_id = Column(String(64), nullable=False)

    # Clinical content
    title = Column(String(255), nullable=False)
    notes = Column(Text, nullable=False)
    prescription = Column(Text, nullable=True)

    # Copied from the appointment
    date = Column(String(10), nullable=False)

    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_medical_records_by_patient", "patient_id", "date", "created_at"),
        Index("ix_medical_records_by_appointment", "appointment_id"),
    )

    def __repr__(self):
        return f"<MedicalRecord(id={self.id}, appointment_id={self.appointment_id}, title='{self.title}')>"
