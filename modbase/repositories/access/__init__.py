from .permission_dependency_repository import PermissionDependencyRepository
from .permission_group_repository import PermissionGroupRepository
from .permission_repository import PermissionRepository
from .role_repository import RoleRepository
from .user_repository import UserRepository

__all__ = [
    "PermissionDependencyRepository",
    "PermissionGroupRepository",
    "PermissionRepository",
    "RoleRepository",
    "UserRepository",
]
