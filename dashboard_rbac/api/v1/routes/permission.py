from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.core.db.session import get_db
from dashboard_rbac.api.v1.schemas.permission import Permission, PermissionCreate, PermissionUpdate
from dashboard_rbac.api.v1.services.permission import PermissionService
from dashboard_rbac.api.v1.dependencies.permissions import require_any_permission, require_permission

router = APIRouter(prefix="", tags=["Permissions"])

can_read_permissions = require_any_permission("manage_permissions", "manage_roles")
can_manage_permissions = require_permission("manage_permissions")


@router.get("/", response_model=List[Permission])
async def read_permissions(
    db: AsyncSession = Depends(get_db),
    user=Depends(can_read_permissions)
):
    return await PermissionService.get_all_permissions(db)

@router.get("/{permission_id}", response_model=Permission)
async def read_permission(
    permission_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_read_permissions)
):
    permission = await PermissionService.get_permission(db, permission_id)
    if not permission:
        raise HTTPException(status_code=404, detail="Permission not found")
    return permission

@router.post("/", response_model=Permission, status_code=status.HTTP_201_CREATED)
async def create_permission(
    permission_in: PermissionCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage_permissions)
):
    return await PermissionService.create_permission(db, permission_in)

@router.put("/{permission_id}", response_model=Permission)
async def update_permission(
    permission_id: int,
    permission_in: PermissionUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage_permissions)
):
    permission = await PermissionService.update_permission(db, permission_id, permission_in)
    if not permission:
        raise HTTPException(status_code=404, detail="Permission not found")
    return permission

@router.delete("/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_permission(
    permission_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage_permissions)
):
    deleted = await PermissionService.delete_permission(db, permission_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Permission not found")
    return None
