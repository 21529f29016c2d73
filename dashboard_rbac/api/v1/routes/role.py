from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.core.db.session import get_db
from dashboard_rbac.api.v1.schemas.role import Role, RoleCreate, RoleUpdate, RolePermissionsUpdate
from dashboard_rbac.api.v1.services.role import RoleService
from dashboard_rbac.api.v1.dependencies.permissions import require_any_permission, require_permission

router = APIRouter(prefix="", tags=["Roles"])

can_read_roles = require_any_permission("manage_roles", "manage_users")
can_manage_roles = require_permission("manage_roles")


def _found(role) -> Role:
    if not role:
        raise HTTPException(status_code=404, detail="Role not found")
    return Role.from_model(role)


@router.get("/", response_model=List[Role])
async def read_roles(
    db: AsyncSession = Depends(get_db),
    user=Depends(can_read_roles)
):
    return [Role.from_model(role) for role in await RoleService.get_all_roles(db)]

@router.get("/{role_id}", response_model=Role)
async def read_role(
    role_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_read_roles)
):
    return _found(await RoleService.get_role(db, role_id))

@router.post("/", response_model=Role, status_code=status.HTTP_201_CREATED)
async def create_role(
    role_in: RoleCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage_roles)
):
    return Role.from_model(await RoleService.create_role(db, role_in))

@router.put("/{role_id}", response_model=Role)
async def update_role(
    role_id: int,
    role_in: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage_roles)
):
    return _found(await RoleService.update_role(db, role_id, role_in))

@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage_roles)
):
    deleted = await RoleService.delete_role(db, role_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Role not found")
    return None

@router.put("/{role_id}/permissions", response_model=Role)
async def replace_role_permissions(
    role_id: int,
    permissions_in: RolePermissionsUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage_roles)
):
    return _found(await RoleService.set_permissions(db, role_id, permissions_in.permission_ids))

@router.post("/{role_id}/permissions/{permission_id}", response_model=Role)
async def grant_role_permission(
    role_id: int,
    permission_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage_roles)
):
    return _found(await RoleService.grant_permission(db, role_id, permission_id))

@router.delete("/{role_id}/permissions/{permission_id}", response_model=Role)
async def revoke_role_permission(
    role_id: int,
    permission_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage_roles)
):
    return _found(await RoleService.revoke_permission(db, role_id, permission_id))
