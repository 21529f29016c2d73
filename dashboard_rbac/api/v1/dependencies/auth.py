from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_rbac.api.v1.models.user import User
from dashboard_rbac.api.v1.schemas.session import SessionClaims
from dashboard_rbac.api.v1.security.jwt import session_codec
from dashboard_rbac.api.v1.services.user import UserService
from dashboard_rbac.core.config import SESSION_COOKIE_NAME
from dashboard_rbac.core.db.session import get_db

bearer_scheme = HTTPBearer(auto_error=False)


def _not_authenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_session_claims(
    request: Request,
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> SessionClaims:
    """
    Verified claims of the caller's session.

    The session cookie is tried first; an ``Authorization: Bearer`` header is
    accepted for API clients and as a fallback when the cookie is stale.
    """
    candidates = [request.cookies.get(SESSION_COOKIE_NAME)]
    if bearer and bearer.scheme.lower() == "bearer":
        candidates.append(bearer.credentials)

    for token in candidates:
        claims = session_codec.verify(token)
        if claims is not None:
            return claims
    raise _not_authenticated()


async def get_current_user(
    claims: SessionClaims = Depends(get_session_claims),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    The stored user behind the session.

    Claims are a snapshot taken at login, so the user is reloaded on every
    request: deleted or deactivated accounts are rejected and permission
    checks use the current role rather than the one in the token.
    """
    user = await UserService.get_user(db, claims.id)
    if user is None:
        raise _not_authenticated()
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")
    return user
