import asyncio
from dataclasses import dataclass

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.api.v1.models.permission import Permission
from dashboard_rbac.api.v1.models.role import Role
from dashboard_rbac.api.v1.models.role_permission import RolePermission
from dashboard_rbac.api.v1.services.registry import PermissionRegistry, registry

DEFAULT_ROLES = (
    ("admin", "Full access to all features"),
    ("manager", "Can manage users and content"),
    ("user", "Basic access to features"),
)

DEFAULT_PERMISSIONS = (
    ("view_dashboard", "Can view dashboard"),
    ("manage_users", "Can manage users"),
    ("edit_settings", "Can edit settings"),
    ("view_reports", "Can view reports"),
    ("manage_roles", "Can manage roles"),
    ("manage_permissions", "Can manage permissions"),
)

DEFAULT_ROLE_PERMISSIONS = {
    "admin": ("view_dashboard", "manage_users", "edit_settings", "view_reports", "manage_roles", "manage_permissions"),
    "manager": ("view_dashboard", "manage_users", "edit_settings", "view_reports"),
    "user": ("view_dashboard", "edit_settings"),
}

_SEED_LOCK = asyncio.Lock()


@dataclass(frozen=True)
class SeedReport:
    roles_created: int = 0
    permissions_created: int = 0
    bindings_created: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.roles_created or self.permissions_created or self.bindings_created)


async def _has_rows(db: AsyncSession, model) -> bool:
    result = await db.execute(select(model.id).limit(1))
    return result.scalars().first() is not None


async def _missing_default_bindings(db: AsyncSession) -> list[RolePermission]:
    roles = dict((await db.execute(select(Role.name, Role.id))).all())
    permissions = dict((await db.execute(select(Permission.name, Permission.id))).all())
    existing = set((await db.execute(select(RolePermission.role_id, RolePermission.permission_id))).all())

    missing = []
    for role_name, permission_names in DEFAULT_ROLE_PERMISSIONS.items():
        role_id = roles.get(role_name)
        if role_id is None:
            continue
        for permission_name in permission_names:
            permission_id = permissions.get(permission_name)
            if permission_id is None or (role_id, permission_id) in existing:
                continue
            missing.append(RolePermission(role_id=role_id, permission_id=permission_id))
    return missing


async def seed_defaults(db: AsyncSession, permission_registry: PermissionRegistry = registry) -> SeedReport:
    """
    Make sure the default roles, permissions and their bindings exist.

    Roles are inserted only into an empty roles table and permissions only
    into an empty permissions table. Whenever either set was inserted, the
    default bindings that are still missing between the default roles and
    permissions are added, so a half-populated store still ends up wired.
    A populated store is left untouched.
    """
    async with _SEED_LOCK:
        try:
            roles_created = permissions_created = bindings_created = 0

            if not await _has_rows(db, Role):
                db.add_all([Role(name=name, description=description) for name, description in DEFAULT_ROLES])
                roles_created = len(DEFAULT_ROLES)

            if not await _has_rows(db, Permission):
                db.add_all(
                    [Permission(name=name, description=description) for name, description in DEFAULT_PERMISSIONS]
                )
                permissions_created = len(DEFAULT_PERMISSIONS)

            if roles_created or permissions_created:
                await db.flush()
                bindings = await _missing_default_bindings(db)
                db.add_all(bindings)
                bindings_created = len(bindings)
                await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("Seeding default roles and permissions failed")
            raise

    report = SeedReport(roles_created, permissions_created, bindings_created)
    if report.changed:
        permission_registry.invalidate_all()
        logger.info(
            f"Seeded {report.roles_created} roles, {report.permissions_created} permissions, "
            f"{report.bindings_created} bindings"
        )
    return report
