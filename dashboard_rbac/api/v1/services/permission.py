from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.api.v1.models.permission import Permission as PermissionModel
from dashboard_rbac.api.v1.schemas.permission import PermissionCreate, PermissionUpdate
from dashboard_rbac.api.v1.services.registry import registry
from dashboard_rbac.api.v1.validators.permission import ensure_unique_permission_name


class PermissionService:

    @staticmethod
    async def get_all_permissions(db: AsyncSession) -> List[PermissionModel]:
        result = await db.execute(select(PermissionModel).order_by(PermissionModel.name))
        return result.scalars().all()

    @staticmethod
    async def get_permission(db: AsyncSession, permission_id: int) -> Optional[PermissionModel]:
        result = await db.execute(select(PermissionModel).where(PermissionModel.id == permission_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def create_permission(db: AsyncSession, permission_in: PermissionCreate) -> PermissionModel:
        await ensure_unique_permission_name(permission_in.name, db)
        permission = PermissionModel(**permission_in.model_dump())
        db.add(permission)
        try:
            await db.commit()
            await db.refresh(permission)
        except SQLAlchemyError:
            await db.rollback()
            raise
        logger.info(f"Created permission '{permission.name}'")
        return permission

    @staticmethod
    async def update_permission(
        db: AsyncSession, permission_id: int, permission_in: PermissionUpdate
    ) -> Optional[PermissionModel]:
        permission = await PermissionService.get_permission(db, permission_id)
        if not permission:
            return None

        changes = permission_in.model_dump(exclude_unset=True)
        new_name = (changes.get("name") or "").strip()
        if new_name and new_name != permission.name:
            await ensure_unique_permission_name(new_name, db)
            changes["name"] = new_name
        elif "name" in changes:
            del changes["name"]

        for key, value in changes.items():
            setattr(permission, key, value)
        try:
            await db.commit()
            await db.refresh(permission)
        except SQLAlchemyError:
            await db.rollback()
            raise

        # A renamed permission changes the sets of every role bound to it
        registry.invalidate_all()
        return permission

    @staticmethod
    async def delete_permission(db: AsyncSession, permission_id: int) -> bool:
        permission = await PermissionService.get_permission(db, permission_id)
        if not permission:
            return False
        try:
            await db.delete(permission)
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            raise

        registry.invalidate_all()
        logger.info(f"Deleted permission '{permission.name}'")
        return True
