from typing import Iterable, List

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from dashboard_rbac.api.v1.models.permission import Permission


async def ensure_unique_permission_name(name: str, db: AsyncSession) -> None:
    result = await db.execute(select(Permission.id).where(Permission.name == name))
    if result.scalars().first() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Permission with name '{name}' already exists."
        )


async def ensure_permissions_exist(permission_ids: Iterable[int], db: AsyncSession) -> List[Permission]:
    ids = set(permission_ids)
    if not ids:
        return []
    result = await db.execute(select(Permission).where(Permission.id.in_(ids)))
    permissions = list(result.scalars().all())
    missing = ids - {permission.id for permission in permissions}
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Permission IDs not found: {sorted(missing)}"
        )
    return permissions
