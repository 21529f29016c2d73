from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from dashboard_rbac.api.v1.models.role import Role, PROTECTED_ROLES


async def ensure_unique_role_name(name: str, db: AsyncSession) -> None:
    result = await db.execute(select(Role.id).where(func.lower(Role.name) == name.lower()))
    if result.scalars().first() is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Role with name '{name}' already exists.")


def ensure_not_protected(role: Role) -> None:
    if role.name.lower() in PROTECTED_ROLES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Protected roles cannot be deleted")
