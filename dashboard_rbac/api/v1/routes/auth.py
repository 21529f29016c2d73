from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.api.v1.dependencies.auth import get_session_claims
from dashboard_rbac.api.v1.schemas.login import LoginRequest, SignupRequest, TokenResponse
from dashboard_rbac.api.v1.schemas.session import SessionClaims
from dashboard_rbac.api.v1.schemas.user import User
from dashboard_rbac.api.v1.security.jwt import session_codec
from dashboard_rbac.api.v1.services.auth import AuthService
from dashboard_rbac.core.db.session import get_db

router = APIRouter(prefix="", tags=["auth"])


@router.post("/signup", response_model=User, status_code=status.HTTP_201_CREATED)
async def signup(
    signup_in: SignupRequest,
    db: AsyncSession = Depends(get_db)
):
    auth_service = AuthService(db=db)
    return await auth_service.signup(signup_in)


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    auth_service = AuthService(db=db)
    user = await auth_service.authenticate(credentials.email, credentials.password)
    token_response = auth_service.create_token_response(user)
    session_codec.set_cookie(response, token_response.access_token)
    return token_response


@router.post("/logout")
async def logout(response: Response):
    session_codec.revoke(response)
    return {"detail": "Logged out"}


@router.get("/session", response_model=SessionClaims)
async def read_session(claims: SessionClaims = Depends(get_session_claims)):
    return claims
