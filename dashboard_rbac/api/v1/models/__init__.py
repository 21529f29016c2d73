from dashboard_rbac.api.v1.models.permission import Permission
from dashboard_rbac.api.v1.models.role import PROTECTED_ROLES, Role
from dashboard_rbac.api.v1.models.role_permission import RolePermission
from dashboard_rbac.api.v1.models.user import User

__all__ = ["Permission", "PROTECTED_ROLES", "Role", "RolePermission", "User"]
