from sqlalchemy import Boolean, Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship
from modbase.db.base import BaseModel, SoftDeletes

class Post(SoftDeletes, BaseModel):
    __tablename__ = "blog_posts"

    name = Column(String(191), nullable=False)
    slug = Column(String(191), unique=True, index=True, nullable=False)
    body = Column(Text, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    category_id = Column(Integer, ForeignKey("blog_categories.id", ondelete="SET NULL"), nullable=True)

    # Relationships
    category = relationship("Category", back_populates="posts")

    def __repr__(self):
        return f"<Post {self.slug}>"
