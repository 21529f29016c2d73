from typing import List, Optional
from pydantic import BaseModel


class AccessCheckRequest(BaseModel):
    permissions: List[str]
    require_all: bool = False


class AccessCheckResponse(BaseModel):
    allowed: bool


class PermissionSet(BaseModel):
    role: Optional[str] = None
    permissions: List[str]


class NavigationItem(BaseModel):
    id: str
    title: str
    path: str


class Navigation(BaseModel):
    sidebar: List[NavigationItem]
    manage_tabs: List[NavigationItem]


class DashboardStats(BaseModel):
    users: int
    active_users: int
    inactive_users: int
    roles: int
    permissions: int
