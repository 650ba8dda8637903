# modbase/models/access/__init__.py

# Import models in dependency order
from .permission_group import PermissionGroup
from .permission import Permission
from .permission_dependency import PermissionDependency
from .role import Role
from .user import User
from .role_permission import RolePermission
from .user_role import UserRole
from .user_permission import UserPermission

__all__ = [
    "PermissionGroup",
    "Permission",
    "PermissionDependency",
    "Role",
    "User",
    "RolePermission",
    "UserRole",
    "UserPermission",
]
