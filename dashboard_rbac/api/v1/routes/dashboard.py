from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.core.db.session import get_db
from dashboard_rbac.api.v1.dependencies.permissions import require_permission
from dashboard_rbac.api.v1.models.permission import Permission
from dashboard_rbac.api.v1.models.role import Role
from dashboard_rbac.api.v1.models.user import User
from dashboard_rbac.api.v1.schemas.access import DashboardStats

router = APIRouter(prefix="", tags=["Dashboard"])


async def _count(db: AsyncSession, statement) -> int:
    result = await db.execute(statement)
    return result.scalar_one()


@router.get("/stats", response_model=DashboardStats)
async def read_stats(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("view_dashboard"))
):
    users = await _count(db, select(func.count(User.id)))
    active_users = await _count(db, select(func.count(User.id)).where(User.status == "active"))
    return DashboardStats(
        users=users,
        active_users=active_users,
        inactive_users=users - active_users,
        roles=await _count(db, select(func.count(Role.id))),
        permissions=await _count(db, select(func.count(Permission.id))),
    )
