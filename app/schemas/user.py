from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Optional
import re

from ..core.security import UserGroup

class UserLogin(BaseModel):
    username: str
    password: str

class UserRegister(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=8, max_length=72)
    name: str = Field(..., min_length=1, max_length=200)
    group: UserGroup = UserGroup.PATIENTS

    @field_validator("username")
    @classmethod
    def username_is_simple(cls, v: str) -> str:
        if not re.match(r"^[A-Za-z0-9_.-]+$", v):
            raise ValueError("Username may only contain letters, digits, '.', '_' and '-'")
        return v

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        if not re.search(r"[A-Za-z]", v) or not re.search(r"\d", v):
            raise ValueError("Password must contain letters and digits")
        return v

class UserResponse(BaseModel):
    id: str
    username: str
    name: str
    group: UserGroup
    groups: List[str]
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse

class RosterEntry(BaseModel):
    id: str
    username: str
    name: str

    class Config:
        from_attributes = True
