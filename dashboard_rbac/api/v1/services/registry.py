import time
from typing import Callable, Dict, FrozenSet, Optional, Tuple

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.api.v1.models.permission import Permission
from dashboard_rbac.api.v1.models.role import Role
from dashboard_rbac.api.v1.models.role_permission import RolePermission
from dashboard_rbac.core.config import PERMISSION_CACHE_TTL_SECONDS

EMPTY: FrozenSet[str] = frozenset()


def normalize_role_name(role_name: Optional[str]) -> str:
    if not role_name or not isinstance(role_name, str):
        return ""
    return role_name.strip().lower()


class PermissionRegistry:
    """
    Answers "which permissions does role X hold" from the role_permissions
    bindings.

    Lookups are cached per normalized role name for ``ttl_seconds``. Any
    service that mutates roles, permissions or bindings must call
    ``invalidate``/``invalidate_all``. Failed lookups return an empty set
    and are not cached, so a store outage denies rather than raises.
    """

    def __init__(
        self,
        ttl_seconds: float = PERMISSION_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._cache: Dict[str, Tuple[float, FrozenSet[str]]] = {}

    async def get_permissions_for_role(self, db: AsyncSession, role_name: Optional[str]) -> FrozenSet[str]:
        key = normalize_role_name(role_name)
        if not key:
            return EMPTY

        cached = self._cache_get(key)
        if cached is not None:
            return cached

        try:
            permissions = await self._load(db, key)
        except Exception as e:
            logger.warning(f"Permission lookup for role '{key}' failed, denying: {e!r}")
            return EMPTY

        self._cache_put(key, permissions)
        return permissions

    async def _load(self, db: AsyncSession, key: str) -> FrozenSet[str]:
        result = await db.execute(
            select(Permission.name)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(Role, Role.id == RolePermission.role_id)
            .where(func.lower(Role.name) == key)
        )
        return frozenset(result.scalars().all())

    def _cache_get(self, key: str) -> Optional[FrozenSet[str]]:
        if self.ttl_seconds <= 0:
            return None
        entry = self._cache.get(key)
        if entry is None:
            return None
        stored_at, permissions = entry
        if self.clock() - stored_at >= self.ttl_seconds:
            self._cache.pop(key, None)
            return None
        return permissions

    def _cache_put(self, key: str, permissions: FrozenSet[str]) -> None:
        if self.ttl_seconds > 0:
            self._cache[key] = (self.clock(), permissions)

    def invalidate(self, role_name: Optional[str]) -> None:
        self._cache.pop(normalize_role_name(role_name), None)

    def invalidate_all(self) -> None:
        self._cache.clear()


registry = PermissionRegistry()
