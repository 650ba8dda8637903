from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from modbase.db.base import BaseModel

class Tag(BaseModel):
    __tablename__ = "blog_tags"

    name = Column(String(100), nullable=False)
    slug = Column(String(100), unique=True, index=True, nullable=False)

    def __repr__(self):
        return f"<Tag {self.slug}>"


class PostTag(BaseModel):
    __tablename__ = "blog_post_tag"

    post_id = Column(Integer, ForeignKey("blog_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    tag_id = Column(Integer, ForeignKey("blog_tags.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint("post_id", "tag_id", name="uq_blog_post_tag"),
    )

    def __repr__(self):
        return f"<PostTag post_id={self.post_id} tag_id={self.tag_id}>"
