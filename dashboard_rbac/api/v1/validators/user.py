import re

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from dashboard_rbac.api.v1.models.user import User
from dashboard_rbac.api.v1.models.role import Role

PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIAL_CHARS = re.compile(r'[!@#$%^&*(),.?":{}|<>]')


async def ensure_unique_email(email: str, db: AsyncSession) -> None:
    """
    Ensures that the provided email address is unique in the User table.
    Emails are compared case-insensitively.
    """
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    if result.scalars().first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")


async def ensure_valid_role(role: str, db: AsyncSession) -> None:
    """
    Ensures that the role name refers to an existing role.
    """
    result = await db.execute(select(Role.id).where(func.lower(Role.name) == role.strip().lower()))
    if result.scalars().first() is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Role '{role}' not found")


def is_strong_password(password: str) -> bool:
    return (
        len(password) >= PASSWORD_MIN_LENGTH
        and re.search(r"[A-Z]", password) is not None
        and re.search(r"[a-z]", password) is not None
        and re.search(r"\d", password) is not None
        and PASSWORD_SPECIAL_CHARS.search(password) is not None
    )


def ensure_password_strength(password: str) -> None:
    """
    At least 8 characters with an upper-case letter, a lower-case letter,
    a digit and a special character.
    """
    if not is_strong_password(password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password must be at least 8 characters long and contain upper-case, "
                   "lower-case, numeric and special characters."
        )
