from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

class ProfileUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)

class ProfileResponse(BaseModel):
    id: str
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
