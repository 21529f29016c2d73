from fastapi import HTTPException, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.api.v1.models.user import User
from dashboard_rbac.api.v1.schemas.login import SignupRequest, TokenResponse
from dashboard_rbac.api.v1.schemas.session import SessionPrincipal
from dashboard_rbac.api.v1.schemas.user import UserCreate
from dashboard_rbac.api.v1.security.jwt import SessionTokenCodec, session_codec
from dashboard_rbac.api.v1.services.user import UserService

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    def __init__(self, db: AsyncSession, codec: SessionTokenCodec = session_codec):
        if db is None:
            raise ValueError("Database session cannot be None")
        self.db = db
        self.codec = codec

    async def signup(self, signup: SignupRequest) -> User:
        """New accounts always start as active members of the 'user' role."""
        user_in = UserCreate(
            email=signup.email,
            name=signup.name,
            password=signup.password,
            role="user",
            status="active",
        )
        return await UserService.create_user(self.db, user_in)

    async def authenticate(self, email: str, password: str) -> User:
        user = await UserService.get_user_by_email(self.db, email)
        # Unknown email and wrong password are indistinguishable to the caller
        if not user or not user.verify_password(password):
            logger.info("Rejected login attempt with invalid credentials")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=INVALID_CREDENTIALS,
                headers={"WWW-Authenticate": "Bearer"},
            )
        if not user.is_active:
            logger.info(f"Rejected login for inactive user {user.id}")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")
        return user

    def create_token_response(self, user: User) -> TokenResponse:
        token = self.codec.issue(SessionPrincipal.model_validate(user))
        claims = self.codec.verify(token)
        return TokenResponse(access_token=token, expires_at=claims.expires_at)
