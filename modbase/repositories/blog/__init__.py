from .category_repository import CategoryRepository
from .post_repository import PostRepository
from .tag_repository import TagRepository

__all__ = ["CategoryRepository", "PostRepository", "TagRepository"]
