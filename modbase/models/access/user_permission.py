from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint
from modbase.db.base import BaseModel

class UserPermission(BaseModel):
    """Permission granted to a user directly, outside any role"""
    __tablename__ = "permission_user"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    permission_id = Column(Integer, ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "permission_id", name="uq_permission_user"),
    )

    def __repr__(self):
        return f"<UserPermission user_id={self.user_id} permission_id={self.permission_id}>"
