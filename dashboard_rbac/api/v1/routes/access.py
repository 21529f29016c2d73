from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.core.db.session import get_db
from dashboard_rbac.api.v1.dependencies.auth import get_current_user
from dashboard_rbac.api.v1.models.user import User as UserModel
from dashboard_rbac.api.v1.schemas.access import AccessCheckRequest, AccessCheckResponse, Navigation, PermissionSet
from dashboard_rbac.api.v1.services.access import MANAGE_TABS, SIDEBAR_ITEMS, evaluator

router = APIRouter(prefix="", tags=["Access"])


@router.post("/check", response_model=AccessCheckResponse)
async def check_access(
    check: AccessCheckRequest,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user)
):
    if check.require_all:
        allowed = await evaluator.has_all_permissions(db, user.role, check.permissions)
    else:
        allowed = await evaluator.has_any_permission(db, user.role, check.permissions)
    return AccessCheckResponse(allowed=allowed)

@router.get("/me", response_model=PermissionSet)
async def read_my_permissions(
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user)
):
    permissions = await evaluator.permissions_for(db, user.role)
    return PermissionSet(role=user.role, permissions=sorted(permissions))

@router.get("/navigation", response_model=Navigation)
async def read_navigation(
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user)
):
    return Navigation(
        sidebar=await evaluator.visible_items(db, user.role, SIDEBAR_ITEMS),
        manage_tabs=await evaluator.visible_items(db, user.role, MANAGE_TABS),
    )
