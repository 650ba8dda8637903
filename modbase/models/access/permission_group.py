from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from modbase.db.base import BaseModel

class PermissionGroup(BaseModel):
    __tablename__ = "permission_groups"

    name = Column(String(100), nullable=False)
    sort = Column(Integer, default=0, nullable=False)
    parent_id = Column(Integer, ForeignKey("permission_groups.id", ondelete="SET NULL"), nullable=True)

    # Relationships
    parent = relationship("PermissionGroup", remote_side="PermissionGroup.id", back_populates="children")
    children = relationship("PermissionGroup", back_populates="parent")
    permissions = relationship("Permission", back_populates="group")

    def __repr__(self):
        return f"<PermissionGroup {self.name}>"
