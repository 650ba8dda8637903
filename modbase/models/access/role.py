from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship
from modbase.db.base import BaseModel

class Role(BaseModel):
    __tablename__ = "roles"

    name = Column(String(100), unique=True, index=True, nullable=False)
    # Holders of an `all` role pass every permission check
    all = Column(Boolean, default=False, nullable=False)
    sort = Column(Integer, default=0, nullable=False)

    # Relationships
    user_roles = relationship("UserRole", back_populates="role", cascade="all, delete-orphan")
    role_permissions = relationship("RolePermission", back_populates="role", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Role {self.name}>"
