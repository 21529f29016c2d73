from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from datetime import datetime


def _normalize_name(value: str) -> str:
    value = value.strip().lower()
    if not value:
        raise ValueError("Name must not be empty")
    return value


class RoleBase(BaseModel):
    name: str = Field(..., max_length=100)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return _normalize_name(v)


class RoleCreate(RoleBase):
    permission_ids: List[int] = []


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _normalize_name(v)


class RolePermissionsUpdate(BaseModel):
    permission_ids: List[int]


class Role(RoleBase):
    id: int
    permissions: List[str] = []
    created_at: datetime

    @classmethod
    def from_model(cls, role) -> "Role":
        return cls(
            id=role.id,
            name=role.name,
            description=role.description,
            permissions=role.permission_names,
            created_at=role.created_at,
        )
