from modbase.models.blog.post import Post
from modbase.models.blog.tag import PostTag, Tag
from modbase.repositories.base import BaseRepository
from modbase.repositories.relationships import Relationship

class TagRepository(BaseRepository[Tag]):
    model = Tag
    filterable = ("posts.slug",)
    relationships = {
        "posts": Relationship.many_to_many(Post, PostTag, "tag_id", "post_id"),
    }
