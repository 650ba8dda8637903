from modbase.models.blog.category import Category
from modbase.models.blog.post import Post
from modbase.repositories.base import BaseRepository
from modbase.repositories.relationships import Relationship

class CategoryRepository(BaseRepository[Category]):
    model = Category
    sortable = ("created_at",)
    filterable = ("posts.slug", "posts.id")
    relationships = {
        "posts": Relationship.has_many(Post, "category_id"),
    }
