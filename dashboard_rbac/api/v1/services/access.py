from typing import FrozenSet, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.api.v1.models.user import User
from dashboard_rbac.api.v1.services.registry import EMPTY, PermissionRegistry, normalize_role_name, registry

# Sidebar and management tabs of the dashboard, each gated by any of its permissions
SIDEBAR_ITEMS = (
    ("dashboard", "Dashboard", "/dashboard", ("view_dashboard",)),
    ("manage-users", "Manage Users", "/manage-users", ("manage_users", "view_users")),
    ("profile", "Profile", "/profile", ("edit_profile",)),
    ("settings", "Settings", "/settings", ("edit_settings",)),
)
MANAGE_TABS = (
    ("users", "Users", "/manage-users?tab=users", ("manage_users", "view_users")),
    ("roles", "Roles", "/manage-users?tab=roles", ("manage_roles", "view_roles")),
    ("permissions", "Permissions", "/manage-users?tab=permissions", ("manage_permissions", "view_permissions")),
)

USER_ACTIONS = ("role", "status")
DEFAULT_ROLE = "user"
DEFAULT_STATUS = "active"


class AccessEvaluator:
    """
    Allow/deny checks on top of the permission registry.

    Every check denies when the role is missing or the registry could not
    answer. ``has_all_permissions`` with an empty request also denies: an
    empty requirement is treated as a misconfigured gate, not a grant.
    """

    def __init__(self, registry: PermissionRegistry):
        self.registry = registry

    async def permissions_for(self, db: AsyncSession, role: Optional[str]) -> FrozenSet[str]:
        if not normalize_role_name(role):
            return EMPTY
        return await self.registry.get_permissions_for_role(db, role)

    async def has_permission(self, db: AsyncSession, role: Optional[str], permission: str) -> bool:
        if not permission:
            return False
        return permission in await self.permissions_for(db, role)

    async def has_any_permission(self, db: AsyncSession, role: Optional[str], permissions: Iterable[str]) -> bool:
        requested = set(permissions or ())
        if not requested:
            return False
        return not requested.isdisjoint(await self.permissions_for(db, role))

    async def has_all_permissions(self, db: AsyncSession, role: Optional[str], permissions: Iterable[str]) -> bool:
        requested = set(permissions or ())
        if not requested:
            return False
        return requested <= await self.permissions_for(db, role)

    async def visible_items(self, db: AsyncSession, role: Optional[str], items) -> List[dict]:
        granted = await self.permissions_for(db, role)
        return [
            {"id": item_id, "title": title, "path": path}
            for item_id, title, path, required in items
            if not granted.isdisjoint(required)
        ]

    async def can_modify_user(self, db: AsyncSession, actor: User, target: User, action: str) -> bool:
        """
        Whether ``actor`` may apply a management ``action`` to ``target``.

        Nobody manages their own account, only an admin touches an admin,
        role changes are admin-only, and status changes are open to admins
        and to holders of ``manage_users`` for non-admin targets.
        """
        if action not in USER_ACTIONS or actor.id == target.id:
            return False

        actor_role = normalize_role_name(actor.role)
        target_role = normalize_role_name(target.role)

        if target_role == "admin" or action == "role":
            return actor_role == "admin"

        if actor_role == "admin":
            return True
        return await self.has_permission(db, actor.role, "manage_users")

    async def can_create_user(self, db: AsyncSession, actor: User, role: Optional[str], status: str) -> bool:
        """
        Whether ``actor`` may create an account with ``role`` and ``status``.

        Admins create anything. Other holders of ``manage_users`` only create
        active accounts with the default ``user`` role.
        """
        if normalize_role_name(actor.role) == "admin":
            return True
        if (normalize_role_name(role) or DEFAULT_ROLE) != DEFAULT_ROLE or status != DEFAULT_STATUS:
            return False
        return await self.has_permission(db, actor.role, "manage_users")


evaluator = AccessEvaluator(registry)
