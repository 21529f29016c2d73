from typing import List, Optional

from fastapi import HTTPException, status
from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.api.v1.models.role import Role as RoleModel
from dashboard_rbac.api.v1.models.role_permission import RolePermission
from dashboard_rbac.api.v1.models.user import User as UserModel
from dashboard_rbac.api.v1.schemas.role import RoleCreate, RoleUpdate
from dashboard_rbac.api.v1.services.permission import PermissionService
from dashboard_rbac.api.v1.services.registry import registry
from dashboard_rbac.api.v1.validators.permission import ensure_permissions_exist
from dashboard_rbac.api.v1.validators.role import ensure_not_protected, ensure_unique_role_name


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise


class RoleService:

    @staticmethod
    async def get_all_roles(db: AsyncSession) -> List[RoleModel]:
        result = await db.execute(
            select(RoleModel).order_by(RoleModel.name).execution_options(populate_existing=True)
        )
        return result.scalars().all()

    @staticmethod
    async def get_role(db: AsyncSession, role_id: int) -> Optional[RoleModel]:
        result = await db.execute(
            select(RoleModel).where(RoleModel.id == role_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_role_by_name(db: AsyncSession, name: str) -> Optional[RoleModel]:
        result = await db.execute(
            select(RoleModel)
            .where(func.lower(RoleModel.name) == name.strip().lower())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def create_role(db: AsyncSession, role_in: RoleCreate) -> RoleModel:
        await ensure_unique_role_name(role_in.name, db)
        permissions = await ensure_permissions_exist(role_in.permission_ids, db)

        role = RoleModel(name=role_in.name, description=role_in.description)
        role.bindings = [RolePermission(permission=permission) for permission in permissions]
        db.add(role)
        await _commit(db)

        registry.invalidate(role.name)
        logger.info(f"Created role '{role.name}' with {len(permissions)} permissions")
        return await RoleService.get_role(db, role.id)

    @staticmethod
    async def update_role(db: AsyncSession, role_id: int, role_in: RoleUpdate) -> Optional[RoleModel]:
        role = await RoleService.get_role(db, role_id)
        if not role:
            return None

        old_name = role.name
        changes = role_in.model_dump(exclude_unset=True)
        new_name = changes.get("name")
        if new_name is not None and new_name != old_name:
            if role.is_protected:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Protected roles cannot be renamed")
            await ensure_unique_role_name(new_name, db)

        for key, value in changes.items():
            if key == "name" and value is None:
                continue
            setattr(role, key, value)
        await _commit(db)

        if role.name != old_name:
            registry.invalidate(old_name)
            registry.invalidate(role.name)
            result = await db.execute(select(func.count(UserModel.id)).where(UserModel.role == old_name))
            stranded = result.scalar_one()
            if stranded:
                logger.warning(f"Role '{old_name}' renamed to '{role.name}'; {stranded} users still reference the old name")
        return await RoleService.get_role(db, role.id)

    @staticmethod
    async def delete_role(db: AsyncSession, role_id: int) -> bool:
        role = await RoleService.get_role(db, role_id)
        if not role:
            return False
        ensure_not_protected(role)

        await db.delete(role)
        await _commit(db)

        registry.invalidate(role.name)
        logger.info(f"Deleted role '{role.name}'")
        return True

    @staticmethod
    async def grant_permission(db: AsyncSession, role_id: int, permission_id: int) -> Optional[RoleModel]:
        role = await RoleService.get_role(db, role_id)
        if not role:
            return None
        permission = await PermissionService.get_permission(db, permission_id)
        if not permission:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Permission not found")

        if all(binding.permission_id != permission.id for binding in role.bindings):
            role.bindings.append(RolePermission(permission=permission))
            await _commit(db)
            registry.invalidate(role.name)
        return await RoleService.get_role(db, role.id)

    @staticmethod
    async def revoke_permission(db: AsyncSession, role_id: int, permission_id: int) -> Optional[RoleModel]:
        role = await RoleService.get_role(db, role_id)
        if not role:
            return None

        remaining = [binding for binding in role.bindings if binding.permission_id != permission_id]
        if len(remaining) != len(role.bindings):
            role.bindings = remaining
            await _commit(db)
            registry.invalidate(role.name)
        return await RoleService.get_role(db, role.id)

    @staticmethod
    async def set_permissions(db: AsyncSession, role_id: int, permission_ids: List[int]) -> Optional[RoleModel]:
        role = await RoleService.get_role(db, role_id)
        if not role:
            return None
        permissions = await ensure_permissions_exist(permission_ids, db)

        wanted = {permission.id: permission for permission in permissions}
        kept = [binding for binding in role.bindings if binding.permission_id in wanted]
        kept_ids = {binding.permission_id for binding in kept}
        added = [RolePermission(permission=p) for pid, p in wanted.items() if pid not in kept_ids]
        role.bindings = kept + added
        await _commit(db)

        registry.invalidate(role.name)
        return await RoleService.get_role(db, role.id)
