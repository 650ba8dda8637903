from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import relationship
from modbase.db.base import BaseModel, SoftDeletes

class User(SoftDeletes, BaseModel):
    __tablename__ = "users"

    name = Column(String(191), nullable=False)
    email = Column(String(191), unique=True, index=True, nullable=False)
    confirmed = Column(Boolean, default=False, nullable=False)
    active = Column(Boolean, default=True, nullable=False)

    # Relationships
    user_roles = relationship("UserRole", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email}>"
