from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import Identity
from ...api.deps import get_current_identity
from ...services.profile_service import ProfileService
from ...schemas.profile import ProfileUpdate, ProfileResponse

router = APIRouter(prefix="/profiles", tags=["Profiles"])

@router.put("/me", response_model=ProfileResponse)
async def save_my_profile(
    profile_data: ProfileUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Create or update the caller's profile."""
    return ProfileService(db).save_profile(identity, profile_data.name)

@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    return ProfileService(db).get_profile(identity, user_id)

@router.delete("/me")
async def delete_my_profile(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    ProfileService(db).delete_profile(identity)
    return {"message": "Profile deleted"}
