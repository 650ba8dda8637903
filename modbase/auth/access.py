"""
Authorization engine.

`AccessService` loads what an actor holds (roles, permissions granted
through roles or directly, the super-role flag) into an immutable
`Grants` snapshot and answers role/permission questions from it.  The
snapshot is cached per service instance, and the service is created per
request, so the role/permission graph is read at most once per actor per
request.

Permission dependencies are advisory by default: `allow()` only looks at
the permission asked for.  With ACCESS_ENFORCE_DEPENDENCIES enabled a
permission is granted only when all of its transitive dependencies are
granted too.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Union

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from modbase.core.config import Settings, settings as default_settings
from modbase.core.database import get_async_session
from modbase.models.access.permission import Permission
from modbase.models.access.permission_dependency import PermissionDependency
from modbase.models.access.role import Role
from modbase.models.access.role_permission import RolePermission
from modbase.models.access.user import User
from modbase.models.access.user_permission import UserPermission
from modbase.models.access.user_role import UserRole

logger = logging.getLogger("modbase.access")

NameOrId = Union[str, int]


def _as_id(value: NameOrId) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


@dataclass(frozen=True)
class Grants:
    """What one actor holds. All checks are pure reads over this snapshot."""

    user_id: Optional[int] = None
    role_ids: FrozenSet[int] = frozenset()
    role_names: FrozenSet[str] = frozenset()
    permission_ids: FrozenSet[int] = frozenset()
    permission_names: FrozenSet[str] = frozenset()
    permission_lookup: Mapping[str, int] = field(default_factory=dict)
    superuser: bool = False
    dependencies: Optional[Mapping[int, FrozenSet[int]]] = None

    @classmethod
    def nothing(cls, user_id: Optional[int] = None) -> "Grants":
        return cls(user_id=user_id)

    def has_role(self, role: NameOrId) -> bool:
        if role in self.role_names:
            return True
        role_id = _as_id(role)
        return role_id is not None and role_id in self.role_ids

    def has_roles(self, roles: Iterable[NameOrId], require_all: bool = False) -> bool:
        roles = list(roles)
        if not roles:
            return False
        if require_all:
            return all(self.has_role(role) for role in roles)
        return any(self.has_role(role) for role in roles)

    def _holds(self, permission: NameOrId) -> Optional[int]:
        """Id of the held permission, or None when not held."""
        if isinstance(permission, str) and permission in self.permission_names:
            return self.permission_lookup.get(permission, -1)
        permission_id = _as_id(permission)
        if permission_id is not None and permission_id in self.permission_ids:
            return permission_id
        return None

    def _dependencies_met(self, permission_id: int) -> bool:
        stack = list(self.dependencies.get(permission_id, ()))
        seen = set()
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            if current not in self.permission_ids:
                return False
            stack.extend(self.dependencies.get(current, ()))
        return True

    def allow(self, permission: NameOrId) -> bool:
        if self.superuser:
            return True
        permission_id = self._holds(permission)
        if permission_id is None:
            return False
        if self.dependencies is None:
            return True
        return self._dependencies_met(permission_id)

    def allow_multiple(self, permissions: Iterable[NameOrId], require_all: bool = False) -> bool:
        permissions = list(permissions)
        if not permissions:
            return False
        if require_all:
            return all(self.allow(permission) for permission in permissions)
        return any(self.allow(permission) for permission in permissions)


class AccessService:
    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or default_settings
        self._cache: Dict[int, Grants] = {}

    def invalidate(self, user: Optional[User] = None) -> None:
        if user is None:
            self._cache.clear()
        else:
            self._cache.pop(user.id, None)

    async def grants_for(self, user: Optional[User]) -> Grants:
        if user is None:
            return Grants.nothing()

        if not user.active or getattr(user, "deleted_at", None) is not None:
            return Grants.nothing(user.id)
        if self.settings.ACCESS_REQUIRE_CONFIRMED and not user.confirmed:
            return Grants.nothing(user.id)

        if user.id not in self._cache:
            self._cache[user.id] = await self._load(user.id)
        return self._cache[user.id]

    async def _load(self, user_id: int) -> Grants:
        roles = (
            await self.session.execute(
                select(Role.id, Role.name, Role.all)
                .join(UserRole, UserRole.role_id == Role.id)
                .where(UserRole.user_id == user_id)
            )
        ).all()
        role_ids = frozenset(row.id for row in roles)

        via_roles = select(Permission.id, Permission.name).join(
            RolePermission, RolePermission.permission_id == Permission.id
        ).where(RolePermission.role_id.in_(list(role_ids)))
        direct = select(Permission.id, Permission.name).join(
            UserPermission, UserPermission.permission_id == Permission.id
        ).where(UserPermission.user_id == user_id)
        permissions = (await self.session.execute(via_roles.union(direct))).all()

        dependencies = None
        if self.settings.ACCESS_ENFORCE_DEPENDENCIES:
            edges: Dict[int, set] = {}
            result = await self.session.execute(
                select(PermissionDependency.permission_id, PermissionDependency.dependency_id)
            )
            for permission_id, dependency_id in result.all():
                edges.setdefault(permission_id, set()).add(dependency_id)
            dependencies = {key: frozenset(value) for key, value in edges.items()}

        grants = Grants(
            user_id=user_id,
            role_ids=role_ids,
            role_names=frozenset(row.name for row in roles),
            permission_ids=frozenset(row[0] for row in permissions),
            permission_names=frozenset(row[1] for row in permissions),
            permission_lookup={row[1]: row[0] for row in permissions},
            superuser=any(row.all for row in roles),
            dependencies=dependencies,
        )
        logger.debug(
            f"Loaded grants for user {user_id}: roles={sorted(grants.role_names)} "
            f"permissions={len(grants.permission_ids)} superuser={grants.superuser}"
        )
        return grants

    async def has_role(self, user: Optional[User], role: NameOrId) -> bool:
        result = (await self.grants_for(user)).has_role(role)
        logger.debug(f"has_role({role!r}) for user {getattr(user, 'id', None)}: {result}")
        return result

    async def has_roles(self, user: Optional[User], roles: Iterable[NameOrId], require_all: bool = False) -> bool:
        return (await self.grants_for(user)).has_roles(roles, require_all)

    async def allow(self, user: Optional[User], permission: NameOrId) -> bool:
        result = (await self.grants_for(user)).allow(permission)
        logger.debug(f"allow({permission!r}) for user {getattr(user, 'id', None)}: {result}")
        return result

    async def allow_multiple(self, user: Optional[User], permissions: Iterable[NameOrId], require_all: bool = False) -> bool:
        return (await self.grants_for(user)).allow_multiple(permissions, require_all)


async def get_access_service(session: AsyncSession = Depends(get_async_session)) -> AccessService:
    """Request-scoped access service"""
    return AccessService(session)
