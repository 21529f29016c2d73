from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from fastapi import HTTPException, status
from loguru import logger

from dashboard_rbac.api.v1.models.user import User as UserModel
from dashboard_rbac.api.v1.schemas.user import UserCreate, ProfileUpdate, PasswordChange
from dashboard_rbac.api.v1.security.passwords import hash_password
from dashboard_rbac.api.v1.validators.user import (
    ensure_unique_email,
    ensure_valid_role,
    ensure_password_strength,
)


class UserService:
    """Credential store: user records keyed by id and by lower-cased email."""

    @staticmethod
    async def _save(db: AsyncSession, user: UserModel) -> UserModel:
        try:
            await db.commit()
            await db.refresh(user)
            return user
        except SQLAlchemyError:
            await db.rollback()
            raise

    @staticmethod
    async def get_all_users(db: AsyncSession) -> List[UserModel]:
        """
        Retrieves all users, newest first.
        """
        result = await db.execute(select(UserModel).order_by(UserModel.created_at.desc(), UserModel.id.desc()))
        return result.scalars().all()

    @staticmethod
    async def get_user(db: AsyncSession, user_id: int) -> Optional[UserModel]:
        result = await db.execute(select(UserModel).where(UserModel.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[UserModel]:
        result = await db.execute(select(UserModel).where(func.lower(UserModel.email) == email.strip().lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def create_user(db: AsyncSession, user_in: UserCreate) -> UserModel:
        """
        Creates a user after validating email uniqueness, role and password strength.
        """
        email = user_in.email.lower()
        role = (user_in.role or "user").strip().lower()
        await ensure_unique_email(email, db)
        await ensure_valid_role(role, db)
        ensure_password_strength(user_in.password)

        new_user = UserModel(
            email=email,
            name=user_in.name,
            password=hash_password(user_in.password),
            role=role,
            status=user_in.status,
        )
        db.add(new_user)
        user = await UserService._save(db, new_user)
        logger.info(f"Created user {user.id} with role '{role}'")
        return user

    @staticmethod
    async def update_profile(db: AsyncSession, user_id: int, profile_in: ProfileUpdate) -> Optional[UserModel]:
        user = await UserService.get_user(db, user_id)
        if not user:
            return None

        changes = profile_in.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in changes and changes["email"] != user.email:
            await ensure_unique_email(changes["email"], db)
        for key, value in changes.items():
            setattr(user, key, value)
        return await UserService._save(db, user)

    @staticmethod
    async def change_role(db: AsyncSession, user_id: int, role: str) -> Optional[UserModel]:
        user = await UserService.get_user(db, user_id)
        if not user:
            return None
        role = role.strip().lower()
        await ensure_valid_role(role, db)
        user.role = role
        user = await UserService._save(db, user)
        logger.info(f"User {user.id} role changed to '{role}'")
        return user

    @staticmethod
    async def change_status(db: AsyncSession, user_id: int, new_status: str) -> Optional[UserModel]:
        user = await UserService.get_user(db, user_id)
        if not user:
            return None
        user.status = new_status
        user = await UserService._save(db, user)
        logger.info(f"User {user.id} status changed to '{new_status}'")
        return user

    @staticmethod
    async def change_password(db: AsyncSession, user_id: int, change: PasswordChange) -> Optional[UserModel]:
        user = await UserService.get_user(db, user_id)
        if not user:
            return None
        if not user.verify_password(change.current_password):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
        if change.new_password != change.confirm_password:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="New passwords do not match")
        ensure_password_strength(change.new_password)

        user.set_password(change.new_password)
        return await UserService._save(db, user)
