from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SessionPrincipal(BaseModel):
    """Fields of a user that are snapshotted into a session token."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    email: str
    name: Optional[str] = None
    role: Optional[str] = None
    status: str


class SessionClaims(SessionPrincipal):
    issued_at: datetime
    expires_at: datetime

    def principal(self) -> SessionPrincipal:
        return SessionPrincipal(**self.model_dump(exclude={"issued_at", "expires_at"}))
