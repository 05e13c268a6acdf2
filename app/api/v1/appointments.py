from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...core.security import Identity
from ...api.deps import get_current_identity
from ...services.appointment_service import AppointmentService
from ...schemas.appointment import AppointmentCreate, AppointmentComplete, AppointmentView
from ...schemas.medical_record import MedicalRecordView

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.post("", response_model=AppointmentView, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    appointment_data: AppointmentCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Book an appointment with a doctor."""
    service = AppointmentService(db)
    appointment = service.book(
        identity,
        patient_id=appointment_data.patient_id or identity.id,
        doctor_id=appointment_data.doctor_id,
        date=appointment_data.date,
        time=appointment_data.time,
        reason=appointment_data.reason,
    )
    return service.appointment_views([appointment])[0]

@router.get("", response_model=List[AppointmentView])
async def list_my_appointments(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """The caller's appointments, earliest first, with doctor and patient names."""
    service = AppointmentService(db)
    return service.appointment_views(service.list_appointments_for_user(identity))

@router.get("/{appointment_id}", response_model=AppointmentView)
async def get_appointment(
    appointment_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    service = AppointmentService(db)
    return service.appointment_views([service.get_appointment(identity, appointment_id)])[0]

@router.post("/{appointment_id}/cancel", response_model=AppointmentView)
async def cancel_appointment(
    appointment_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Cancel a scheduled appointment (patient only)."""
    service = AppointmentService(db)
    return service.appointment_views([service.cancel(identity, appointment_id)])[0]

@router.post("/{appointment_id}/complete", response_model=AppointmentView)
async def complete_appointment(
    appointment_id: str,
    completion: Optional[AppointmentComplete] = None,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Mark an appointment completed, writing its medical record when one is given."""
    service = AppointmentService(db)
    if completion and completion.record:
        service.complete_with_record(
            identity,
            appointment_id,
            title=completion.record.title,
            notes=completion.record.notes,
            prescription=completion.record.prescription,
        )
        appointment = service.get_appointment(identity, appointment_id)
    else:
        appointment = service.complete(identity, appointment_id)
    return service.appointment_views([appointment])[0]

@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(
    appointment_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    AppointmentService(db).delete_appointment(identity, appointment_id)

@router.get("/{appointment_id}/records", response_model=List[MedicalRecordView])
async def list_appointment_records(
    appointment_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    service = AppointmentService(db)
    return service.record_views(service.list_records_for_appointment(identity, appointment_id))
