from typing import Callable

from fastapi import Depends, HTTPException, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.api.v1.dependencies.auth import get_current_user
from dashboard_rbac.api.v1.models.user import User
from dashboard_rbac.api.v1.services.access import evaluator
from dashboard_rbac.core.db.session import get_db


def _denied(user: User, required) -> HTTPException:
    logger.info(f"User {user.id} with role '{user.role}' denied, requires {required}")
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission denied")


def require_permission(permission: str) -> Callable:
    """
    FastAPI dependency factory granting access when the caller's role holds
    ``permission``. Returns the current user.
    """
    async def permission_guard(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
        if not await evaluator.has_permission(db, user.role, permission):
            raise _denied(user, permission)
        return user

    return permission_guard


def require_any_permission(*permissions: str) -> Callable:
    async def any_permission_guard(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
        if not await evaluator.has_any_permission(db, user.role, permissions):
            raise _denied(user, f"any of {list(permissions)}")
        return user

    return any_permission_guard


def require_all_permissions(*permissions: str) -> Callable:
    async def all_permissions_guard(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
        if not await evaluator.has_all_permissions(db, user.role, permissions):
            raise _denied(user, f"all of {list(permissions)}")
        return user

    return all_permissions_guard
