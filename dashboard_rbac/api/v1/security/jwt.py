from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import Response
from jose import jwt
from jose.exceptions import JOSEError
from jose.utils import base64url_decode, base64url_encode
from loguru import logger
from pydantic import ValidationError

from dashboard_rbac.api.v1.schemas.session import SessionClaims, SessionPrincipal
from dashboard_rbac.core.config import (
    ALGORITHM,
    SECRET_KEY,
    SESSION_COOKIE_NAME,
    SESSION_COOKIE_SECURE,
    SESSION_TTL_SECONDS,
)

REQUIRED_CLAIMS = ("sub", "email", "status", "iat", "exp")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_canonical_token(token: str) -> bool:
    """
    True when the token has three base64url segments that re-encode to
    themselves. Unused padding bits in the last character of a segment are
    ignored by the decoder, so a token differing only in those bits would
    otherwise verify.
    """
    segments = token.split(".")
    if len(segments) != 3:
        return False
    try:
        return all(
            base64url_encode(base64url_decode(segment.encode("ascii"))).decode("ascii") == segment
            for segment in segments
        )
    except ValueError:
        return False


class SessionTokenCodec:
    """
    Issues and verifies signed session tokens.

    A token is an HS256 JWT whose payload is a snapshot of the principal
    plus ``iat``/``exp`` in whole seconds, with ``exp`` exactly
    ``SESSION_TTL_SECONDS`` after ``iat``. Verification never raises:
    anything that is not a currently valid token comes back as ``None``.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl_seconds: int = SESSION_TTL_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        if not secret:
            raise ValueError("A signing secret is required")
        self.secret = secret
        self.algorithm = algorithm
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def issue(self, principal: SessionPrincipal) -> str:
        issued_at = int(self.clock().timestamp())
        payload = {
            "sub": str(principal.id),
            "email": principal.email,
            "name": principal.name,
            "role": principal.role,
            "status": principal.status,
            "iat": issued_at,
            "exp": issued_at + self.ttl_seconds,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Optional[SessionClaims]:
        if not token or not isinstance(token, str) or not is_canonical_token(token):
            return None
        try:
            # Expiry is checked below so the boundary second counts as expired
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JOSEError as e:
            logger.debug(f"Rejected session token: {e}")
            return None

        if any(payload.get(claim) is None for claim in REQUIRED_CLAIMS):
            return None

        try:
            issued_at = int(payload["iat"])
            expires_at = int(payload["exp"])
            if self.clock().timestamp() >= expires_at:
                return None
            return SessionClaims(
                id=int(payload["sub"]),
                email=payload["email"],
                name=payload.get("name"),
                role=payload.get("role"),
                status=payload["status"],
                issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
                expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
            )
        except (TypeError, ValueError, OverflowError, OSError, ValidationError):
            return None

    def set_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value=token,
            max_age=self.ttl_seconds,
            path="/",
            secure=SESSION_COOKIE_SECURE,
            httponly=True,
            samesite="strict",
        )

    def revoke(self, response: Response) -> None:
        """Clear the session cookie. Safe to call when no cookie was set."""
        response.delete_cookie(
            key=SESSION_COOKIE_NAME,
            path="/",
            secure=SESSION_COOKIE_SECURE,
            httponly=True,
            samesite="strict",
        )


session_codec = SessionTokenCodec(str(SECRET_KEY), ALGORITHM)
