from modbase.models.access.permission_group import PermissionGroup
from modbase.models.access.permission import Permission
from modbase.models.access.permission_dependency import PermissionDependency
from modbase.models.access.role import Role
from modbase.models.access.role_permission import RolePermission
from modbase.models.access.user import User
from modbase.models.access.user_role import UserRole
from modbase.models.access.user_permission import UserPermission
from modbase.models.blog.category import Category
from modbase.models.blog.post import Post
from modbase.models.blog.tag import Tag, PostTag


__all__ = [
    "PermissionGroup",
    "Permission",
    "PermissionDependency",
    "Role",
    "RolePermission",
    "User",
    "UserRole",
    "UserPermission",
    "Category",
    "Post",
    "Tag",
    "PostTag",
]
