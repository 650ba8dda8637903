from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint
from modbase.db.base import BaseModel

class PermissionDependency(BaseModel):
    """Advisory edge: permission_id depends on dependency_id"""
    __tablename__ = "permission_dependencies"

    permission_id = Column(Integer, ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False, index=True)
    dependency_id = Column(Integer, ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint("permission_id", "dependency_id", name="uq_permission_dependency"),
    )

    def __repr__(self):
        return f"<PermissionDependency {self.permission_id} -> {self.dependency_id}>"
