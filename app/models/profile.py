from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func

from ..core.database import Base

class UserProfile(Base):
    __tablename__ = "user_profiles"

    # Identity id of the owner
    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<UserProfile(id={self.id}, name='{self.name}')>"
