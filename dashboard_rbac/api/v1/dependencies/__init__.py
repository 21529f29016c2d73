from dashboard_rbac.api.v1.dependencies.auth import get_current_user, get_session_claims
from dashboard_rbac.api.v1.dependencies.permissions import (
    require_all_permissions,
    require_any_permission,
    require_permission,
)

__all__ = [
    "get_current_user",
    "get_session_claims",
    "require_all_permissions",
    "require_any_permission",
    "require_permission",
]
