from sqlalchemy.orm import Session
from datetime import datetime
from typing import Dict, List, Optional
import logging
import re

from ..models.appointment import Appointment, AppointmentStatus, TERMINAL_STATUSES
from ..models.medical_record import MedicalRecord
from ..models.user import User
from ..core.exceptions import AuthorizationError, InvalidTransition, ValidationError
from ..core.policy import Operation, authorize
from ..core.security import Identity, UserGroup
from ..schemas.appointment import AppointmentView
from ..schemas.medical_record import MedicalRecordView
from ..schemas.user import RosterEntry
from .data_store import DataStore

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

def clean_optional(value: Optional[str]) -> Optional[str]:
    """Strip optional text; blank becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None

def validate_date(value: str) -> str:
    """Require a real calendar date in YYYY-MM-DD form."""
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")
    # strptime also accepts unpadded parts, which would break lexicographic ordering
    if parsed.strftime("%Y-%m-%d") != value:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")
    return value

def validate_time(value: str) -> str:
    """Require a 24-hour HH:MM time."""
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValidationError(f"Invalid time '{value}', expected HH:MM")
    return value

class AppointmentService:
    """Booking, the appointment lifecycle, medical records and their listings."""

    def __init__(self, db: Session):
        self.db = db
        self.appointments = DataStore(
            db, Appointment,
            required=("patient_id", "doctor_id", "date", "time"),
            indexed=("patient_id", "doctor_id"),
        )
        self.records = DataStore(
            db, MedicalRecord,
            required=("appointment_id", "patient_id", "doctor_id", "title", "notes", "date"),
            indexed=("patient_id", "appointment_id"),
        )

    # Appointments

    def book(
        self,
        identity: Identity,
        patient_id: str,
        doctor_id: str,
        date: str,
        time: str,
        reason: Optional[str] = None
    ) -> Appointment:
        """Create a Scheduled appointment. Double booking is not checked."""
        missing = [
            name for name, value in (
                ("patient_id", patient_id), ("doctor_id", doctor_id),
                ("date", date), ("time", time),
            )
            if not value
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        appointment = self.appointments.create(identity, {
            "patient_id": patient_id,
            "doctor_id": doctor_id,
            "date": validate_date(date),
            "time": validate_time(time),
            "reason": clean_optional(reason),
            "status": AppointmentStatus.SCHEDULED,
        })

        logger.info(
            f"Booked appointment {appointment.id} for patient {patient_id} "
            f"with doctor {doctor_id} on {date} {time}"
        )
        return appointment

    def get_appointment(self, identity: Identity, appointment_id: str) -> Appointment:
        return self.appointments.get(identity, appointment_id)

    def cancel(self, identity: Identity, appointment_id: str) -> Appointment:
        """
        Cancel a Scheduled appointment on behalf of its patient.

        Cancelling an already Cancelled appointment returns it unchanged;
        a Completed one cannot be cancelled.
        """
        appointment = self.appointments.get(identity, appointment_id)

        if appointment.patient_id != identity.id:
            logger.warning(f"Identity {identity.id} tried to cancel appointment {appointment_id}")
            raise AuthorizationError("Only the patient can cancel this appointment")

        if appointment.status == AppointmentStatus.CANCELLED:
            return appointment
        if appointment.status != AppointmentStatus.SCHEDULED:
            raise InvalidTransition(
                f"Cannot cancel an appointment that is {appointment.status.value}"
            )

        appointment = self.appointments.update(
            identity, appointment_id, {"status": AppointmentStatus.CANCELLED}
        )
        logger.info(f"Cancelled appointment {appointment_id}")
        return appointment

    def complete(self, identity: Identity, appointment_id: str) -> Appointment:
        """Mark a Scheduled appointment Completed. Doctors only."""
        appointment = self.appointments.get(identity, appointment_id)

        if not identity.is_doctor:
            logger.warning(f"Identity {identity.id} tried to complete appointment {appointment_id}")
            raise AuthorizationError("Only doctors can complete appointments")

        if appointment.status in TERMINAL_STATUSES:
            raise InvalidTransition(
                f"Cannot complete an appointment that is {appointment.status.value}"
            )

        appointment = self.appointments.update(
            identity, appointment_id, {"status": AppointmentStatus.COMPLETED}
        )
        logger.info(f"Completed appointment {appointment_id}")
        return appointment

    def complete_with_record(
        self,
        identity: Identity,
        appointment_id: str,
        title: str,
        notes: str,
        prescription: Optional[str] = None
    ) -> MedicalRecord:
        """
        Complete the appointment, then write its medical record.

        The record is fully checked before the status changes. The two writes
        are still separate commits: if the record insert itself fails, the
        appointment stays Completed without a record.
        """
        appointment = self.appointments.get(identity, appointment_id)
        fields = self._prepare_record(
            identity, appointment, title, notes, prescription,
            expected_status=AppointmentStatus.SCHEDULED,
        )

        self.complete(identity, appointment_id)

        record = self.records.create(identity, fields)
        logger.info(f"Created medical record {record.id} for appointment {appointment_id}")
        return record

    def delete_appointment(self, identity: Identity, appointment_id: str) -> None:
        self.appointments.delete(identity, appointment_id)
        logger.info(f"Deleted appointment {appointment_id}")

    def list_appointments_for_user(self, identity: Identity) -> List[Appointment]:
        """A patient's or a doctor's own appointments, earliest first."""
        if identity.is_patient:
            filters = {"patient_id": identity.id}
        elif identity.is_doctor:
            filters = {"doctor_id": identity.id}
        else:
            return []

        return self.appointments.list(identity, filters, order_by=("date", "time"))

    # Medical records

    def create_record(
        self,
        identity: Identity,
        appointment_id: str,
        title: str,
        notes: str,
        prescription: Optional[str] = None
    ) -> MedicalRecord:
        """Attach the one medical record a Completed appointment may have."""
        appointment = self.appointments.get(identity, appointment_id)
        fields = self._prepare_record(
            identity, appointment, title, notes, prescription,
            expected_status=AppointmentStatus.COMPLETED,
        )

        record = self.records.create(identity, fields)
        logger.info(f"Created medical record {record.id} for appointment {appointment.id}")
        return record

    def _prepare_record(
        self,
        identity: Identity,
        appointment: Appointment,
        title: str,
        notes: str,
        prescription: Optional[str],
        expected_status: AppointmentStatus
    ) -> Dict[str, Optional[str]]:
        """Build a record's fields and run every check that can reject it."""
        fields = {
            "appointment_id": appointment.id,
            "patient_id": appointment.patient_id,
            "doctor_id": appointment.doctor_id,
            "title": (title or "").strip(),
            "notes": (notes or "").strip(),
            "prescription": clean_optional(prescription),
            "date": appointment.date,
        }
        # Check the grant before revealing anything about existing records
        authorize(identity, "MedicalRecord", Operation.CREATE, fields)

        if appointment.status != expected_status:
            raise InvalidTransition(
                f"Cannot write a record for an appointment that is {appointment.status.value}"
            )

        missing = [name for name in ("title", "notes") if not fields[name]]
        if missing:
            raise ValidationError(f"MedicalRecord is missing required fields: {', '.join(missing)}")

        if self.records.list(identity, {"appointment_id": appointment.id}):
            raise ValidationError(f"Appointment {appointment.id} already has a medical record")

        return fields

    def get_record(self, identity: Identity, record_id: str) -> MedicalRecord:
        return self.records.get(identity, record_id)

    def list_records_for_patient(self, identity: Identity, patient_id: str) -> List[MedicalRecord]:
        """A patient's records ordered by date, then creation time."""
        authorize(identity, "MedicalRecord", Operation.READ, {"patient_id": patient_id})
        return self.records.list(
            identity, {"patient_id": patient_id}, order_by=("date", "created_at")
        )

    def list_records_for_appointment(self, identity: Identity, appointment_id: str) -> List[MedicalRecord]:
        self.appointments.get(identity, appointment_id)
        return self.records.list(
            identity, {"appointment_id": appointment_id}, order_by=("created_at",)
        )

    # Rosters and display names

    def list_doctors(self) -> List[RosterEntry]:
        return self._roster(UserGroup.DOCTORS)

    def list_patients(self) -> List[RosterEntry]:
        return self._roster(UserGroup.PATIENTS)

    def appointment_views(self, appointments: List[Appointment]) -> List[AppointmentView]:
        names = self._names()
        return [
            AppointmentView.model_validate(appointment).model_copy(update={
                "doctor_name": names.get(appointment.doctor_id),
                "patient_name": names.get(appointment.patient_id),
            })
            for appointment in appointments
        ]

    def record_views(self, records: List[MedicalRecord]) -> List[MedicalRecordView]:
        names = self._names()
        return [
            MedicalRecordView.model_validate(record).model_copy(update={
                "doctor_name": names.get(record.doctor_id),
                "patient_name": names.get(record.patient_id),
            })
            for record in records
        ]

    def _roster(self, group: UserGroup) -> List[RosterEntry]:
        users = self.db.query(User).filter(User.group == group).order_by(User.name).all()
        return [RosterEntry.model_validate(user) for user in users]

    def _names(self) -> Dict[str, str]:
        return {user_id: name for user_id, name in self.db.query(User.id, User.name).all()}
