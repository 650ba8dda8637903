from sqlalchemy import or_
from modbase.models.blog.category import Category
from modbase.models.blog.post import Post
from modbase.models.blog.tag import PostTag, Tag
from modbase.repositories.base import BaseRepository
from modbase.repositories.relationships import Relationship

class PostRepository(BaseRepository[Post]):
    model = Post
    sortable = ("created_at", "updated_at")
    filterable = ("category_id", "created_at", "category.slug", "tags.slug", "tags.id", "search")
    relationships = {
        "category": Relationship.belongs_to(Category, "category_id"),
        "tags": Relationship.many_to_many(Tag, PostTag, "post_id", "tag_id"),
    }

    def filter_handlers(self):
        return {"search": self.filter_by_search}

    def filter_by_search(self, value):
        if not value:
            return
        term = f"%{value}%"
        self.filters.where(or_(Post.name.ilike(term), Post.body.ilike(term)))
