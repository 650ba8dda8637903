from sqlalchemy import Boolean, Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from modbase.db.base import BaseModel

class Permission(BaseModel):
    __tablename__ = "permissions"

    # Dotted and immutable, e.g. 'blog.post.edit'
    name = Column(String(191), unique=True, index=True, nullable=False)
    display_name = Column(String(191), nullable=False)
    system = Column(Boolean, default=False, nullable=False)
    group_id = Column(Integer, ForeignKey("permission_groups.id", ondelete="SET NULL"), nullable=True)
    sort = Column(Integer, default=0, nullable=False)

    # Relationships
    group = relationship("PermissionGroup", back_populates="permissions")
    role_permissions = relationship("RolePermission", back_populates="permission", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Permission {self.name}>"
