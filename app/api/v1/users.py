from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...core.security import Identity, UserGroup
from ...api.deps import get_current_identity, require_group
from ...services.appointment_service import AppointmentService
from ...schemas.user import RosterEntry

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("/doctors", response_model=List[RosterEntry])
async def list_doctors(
    _: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Doctors a patient can book with."""
    return AppointmentService(db).list_doctors()

@router.get("/patients", response_model=List[RosterEntry])
async def list_patients(
    _: Identity = Depends(require_group([UserGroup.DOCTORS])),
    db: Session = Depends(get_db)
):
    """Patient roster (doctors only)."""
    return AppointmentService(db).list_patients()
