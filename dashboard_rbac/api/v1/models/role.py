from sqlalchemy import Column, Integer, String, Text, TIMESTAMP, func
from sqlalchemy.orm import relationship
from dashboard_rbac.core.db import Base

# Built-in roles that can never be deleted
PROTECTED_ROLES = frozenset({"admin", "manager", "user"})


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    bindings = relationship(
        "RolePermission",
        back_populates="role",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def permission_names(self) -> list[str]:
        return sorted(binding.permission.name for binding in self.bindings)

    @property
    def is_protected(self) -> bool:
        return self.name.lower() in PROTECTED_ROLES
