from typing import Optional
from pydantic import BaseModel, Field, field_validator
from datetime import datetime


class PermissionBase(BaseModel):
    name: str = Field(..., max_length=100)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        return v


class PermissionCreate(PermissionBase):
    pass


class PermissionUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None


class Permission(PermissionBase):
    id: int
    created_at: datetime

    model_config = {
        "from_attributes": True
    }
