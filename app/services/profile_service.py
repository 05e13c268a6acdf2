from sqlalchemy.orm import Session
import logging

from ..models.profile import UserProfile
from ..core.security import Identity
from .data_store import DataStore

logger = logging.getLogger(__name__)

class ProfileService:
    """Display-name profiles, one per identity."""

    def __init__(self, db: Session):
        self.db = db
        self.profiles = DataStore(db, UserProfile, required=("id", "name"))

    def save_profile(self, identity: Identity, name: str) -> UserProfile:
        """Create the caller's profile on first write, update it afterwards."""
        name = (name or "").strip()
        existing = self.profiles.find(identity, identity.id)
        if existing is None:
            return self.profiles.create(identity, {"id": identity.id, "name": name})
        return self.profiles.update(identity, identity.id, {"name": name})

    def get_profile(self, identity: Identity, user_id: str) -> UserProfile:
        return self.profiles.get(identity, user_id)

    def delete_profile(self, identity: Identity) -> None:
        self.profiles.delete(identity, identity.id)
        logger.info(f"Deleted profile {identity.id}")
