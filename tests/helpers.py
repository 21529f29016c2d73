from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.api.v1.models import User
from dashboard_rbac.api.v1.schemas.session import SessionPrincipal
from dashboard_rbac.api.v1.security.jwt import session_codec
from dashboard_rbac.api.v1.security.passwords import hash_password

STRONG_PASSWORD = "Str0ng!Pass"


async def make_user(
    session: AsyncSession,
    email: str,
    role: Optional[str] = "user",
    status: str = "active",
    password: str = STRONG_PASSWORD,
    name: str = "Test User",
) -> User:
    user = User(email=email.lower(), name=name, password=hash_password(password), role=role, status=status)
    session.add(user)
    await session.commit()
    if role is None:
        # Inserts skip None and fall back to the column default
        user.role = None
        await session.commit()
    await session.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    token = session_codec.issue(SessionPrincipal.model_validate(user))
    return {"Authorization": f"Bearer {token}"}
