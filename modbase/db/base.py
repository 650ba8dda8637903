from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.sql import func
from modbase.models.base import Base

class BaseModel(Base):
    """Base model with common fields"""
    __abstract__ = True

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class SoftDeletes:
    """Rows with deleted_at set are hidden from default repository queries"""

    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
