from .category import Category
from .post import Post
from .tag import Tag, PostTag

__all__ = ["Category", "Post", "Tag", "PostTag"]
