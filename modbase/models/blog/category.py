from sqlalchemy import Boolean, Column, String, Text
from sqlalchemy.orm import relationship
from modbase.db.base import BaseModel, SoftDeletes

class Category(SoftDeletes, BaseModel):
    __tablename__ = "blog_categories"

    name = Column(String(191), nullable=False)
    slug = Column(String(191), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    active = Column(Boolean, default=True, nullable=False)

    # Relationships
    posts = relationship("Post", back_populates="category")

    def __repr__(self):
        return f"<Category {self.slug}>"
