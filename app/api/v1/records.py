from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...core.security import Identity
from ...api.deps import get_current_identity
from ...services.appointment_service import AppointmentService
from ...schemas.medical_record import MedicalRecordCreate, MedicalRecordView

router = APIRouter(prefix="/records", tags=["Medical Records"])

@router.post("", response_model=MedicalRecordView, status_code=status.HTTP_201_CREATED)
async def create_record(
    record_data: MedicalRecordCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Write the medical record for an appointment (doctors only)."""
    service = AppointmentService(db)
    record = service.create_record(
        identity,
        record_data.appointment_id,
        title=record_data.title,
        notes=record_data.notes,
        prescription=record_data.prescription,
    )
    return service.record_views([record])[0]

@router.get("", response_model=List[MedicalRecordView])
async def list_records(
    patient_id: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """A patient's records by date; defaults to the caller's own."""
    service = AppointmentService(db)
    records = service.list_records_for_patient(identity, patient_id or identity.id)
    return service.record_views(records)

@router.get("/{record_id}", response_model=MedicalRecordView)
async def get_record(
    record_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    service = AppointmentService(db)
    return service.record_views([service.get_record(identity, record_id)])[0]
