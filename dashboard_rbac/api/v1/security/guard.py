from enum import Enum
from typing import Optional

from dashboard_rbac.api.v1.security.jwt import SessionTokenCodec, session_codec
from dashboard_rbac.core.config import AUTH_PATH, DASHBOARD_PATH

PROTECTED_PATHS = ("/dashboard", "/profile", "/settings", "/manage-users")


class RouteDecision(str, Enum):
    ALLOW = "allow"
    REDIRECT_AUTH = "redirect_auth"
    REDIRECT_DASHBOARD = "redirect_dashboard"


def is_protected_path(path: str) -> bool:
    return any(path.startswith(prefix) for prefix in PROTECTED_PATHS)


def guard_route(
    path: str,
    token: Optional[str],
    codec: SessionTokenCodec = session_codec,
) -> RouteDecision:
    """Decide what to do with a page request given its session cookie."""
    has_session = codec.verify(token) is not None

    if is_protected_path(path) and not has_session:
        return RouteDecision.REDIRECT_AUTH
    if path == AUTH_PATH and has_session:
        return RouteDecision.REDIRECT_DASHBOARD
    return RouteDecision.ALLOW


def redirect_target(decision: RouteDecision) -> Optional[str]:
    if decision is RouteDecision.REDIRECT_AUTH:
        return AUTH_PATH
    if decision is RouteDecision.REDIRECT_DASHBOARD:
        return DASHBOARD_PATH
    return None
