from sqlalchemy import Column, String, DateTime, Text, Index, Enum as SQLEnum
from datetime import datetime, timezone
import enum
import uuid

from ..core.database import Base

class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

TERMINAL_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Identity ids; not foreign keys, the store trusts caller-supplied ids
    patient_id = Column(String(64), nullable=False)
    doctor_id = Column(String(64), nullable=False)

    # Appointment details; fixed-width strings so lexicographic order is chronological
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    time = Column(String(5), nullable=False)   # HH:MM
    reason = Column(Text, nullable=True)
    status = Column(
        SQLEnum(
            AppointmentStatus,
            name="appointment_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
    )

    # Tracking
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # Lookup paths
    __table_args__ = (
        Index("ix_appointments_by_patient", "patient_id", "date", "time"),
        Index("ix_appointments_by_doctor", "doctor_id", "date", "time"),
    )

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id}, date='{self.date} {self.time}', status='{self.status}')>"
