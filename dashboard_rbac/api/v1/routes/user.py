from fastapi import APIRouter, Depends, HTTPException, Response, status
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.core.db.session import get_db
from dashboard_rbac.api.v1.dependencies.auth import get_current_user
from dashboard_rbac.api.v1.dependencies.permissions import require_any_permission, require_permission
from dashboard_rbac.api.v1.models.user import User as UserModel
from dashboard_rbac.api.v1.schemas.session import SessionPrincipal
from dashboard_rbac.api.v1.schemas.user import User, UserCreate, ProfileUpdate, PasswordChange, RoleChange, StatusChange
from dashboard_rbac.api.v1.security.jwt import session_codec
from dashboard_rbac.api.v1.services.access import evaluator
from dashboard_rbac.api.v1.services.user import UserService

router = APIRouter(prefix="", tags=["Users"])

can_read_users = require_any_permission("manage_users", "view_users")


async def _load_target(db: AsyncSession, user_id: int) -> UserModel:
    user = await UserService.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def _ensure_can_modify(db: AsyncSession, actor: UserModel, target: UserModel, action: str) -> None:
    if not await evaluator.can_modify_user(db, actor, target, action):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission denied")


@router.get("/", response_model=List[User])
async def read_users(
    db: AsyncSession = Depends(get_db),
    user=Depends(can_read_users)
):
    return await UserService.get_all_users(db)

@router.post("/", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db),
    actor: UserModel = Depends(require_permission("manage_users"))
):
    if not await evaluator.can_create_user(db, actor, user_in.role, user_in.status):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission denied")
    return await UserService.create_user(db, user_in)

@router.get("/me", response_model=User)
async def read_me(user: UserModel = Depends(get_current_user)):
    return user

@router.patch("/me", response_model=User)
async def update_me(
    profile_in: ProfileUpdate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user)
):
    updated = await UserService.update_profile(db, user.id, profile_in)
    # Reissue the session so its snapshot matches the new profile
    session_codec.set_cookie(response, session_codec.issue(SessionPrincipal.model_validate(updated)))
    return updated

@router.post("/me/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_my_password(
    change: PasswordChange,
    db: AsyncSession = Depends(get_db),
    user: UserModel = Depends(get_current_user)
):
    await UserService.change_password(db, user.id, change)
    return None

@router.get("/{user_id}", response_model=User)
async def read_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_read_users)
):
    return await _load_target(db, user_id)

@router.put("/{user_id}/role", response_model=User)
async def change_user_role(
    user_id: int,
    change: RoleChange,
    db: AsyncSession = Depends(get_db),
    actor: UserModel = Depends(get_current_user)
):
    target = await _load_target(db, user_id)
    await _ensure_can_modify(db, actor, target, "role")
    return await UserService.change_role(db, user_id, change.role)

@router.put("/{user_id}/status", response_model=User)
async def change_user_status(
    user_id: int,
    change: StatusChange,
    db: AsyncSession = Depends(get_db),
    actor: UserModel = Depends(get_current_user)
):
    target = await _load_target(db, user_id)
    await _ensure_can_modify(db, actor, target, "status")
    return await UserService.change_status(db, user_id, change.status)
