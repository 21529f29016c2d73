from sqlalchemy import Column, Integer, String, Text, TIMESTAMP, func
from dashboard_rbac.core.db import Base
from dashboard_rbac.api.v1.security.passwords import hash_password, verify_password


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)  # always stored lower-cased
    name = Column(Text, nullable=True)
    password = Column(Text, nullable=False)  # store hashed password here
    # Role is referenced by name; renaming a role does not follow through to users
    role = Column(String(100), nullable=True, default="user")
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def verify_password(self, plain_password: str) -> bool:
        """Verify plain password against the stored hashed password."""
        return verify_password(self.password, plain_password)

    def set_password(self, plain_password: str):
        """Hash and set password."""
        self.password = hash_password(plain_password)
