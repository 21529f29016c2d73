from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Literal, Optional
from datetime import datetime

UserStatus = Literal["active", "inactive"]


class UserBase(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    role: Optional[str] = "user"
    status: UserStatus = "active"

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class UserCreate(UserBase):
    password: str


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v


class RoleChange(BaseModel):
    role: str

    @field_validator("role")
    @classmethod
    def normalize_role(cls, v: str) -> str:
        return v.strip().lower()


class StatusChange(BaseModel):
    status: UserStatus


class PasswordChange(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str


class User(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True  # Pydantic v2 equivalent of orm_mode
    }
