from sqlalchemy import Column, String, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
import uuid

from ..core.database import Base
from ..core.security import UserGroup

class User(Base):
    """A login known to the identity stub; its id is the identity subject."""
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(200), nullable=False)
    group = Column(
        SQLEnum(
            UserGroup,
            name="user_group",
            values_callable=lambda groups: [g.value for g in groups],
        ),
        nullable=False,
        index=True,
    )

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())

    @property
    def groups(self):
        return [self.group.value]

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', group='{self.group}')>"
