from typing import Any, Optional
from sqlalchemy import func, select
from modbase.core.config import settings
from modbase.core.exceptions import ValidationError
from modbase.models.access.permission import Permission
from modbase.models.access.role import Role
from modbase.models.access.role_permission import RolePermission
from modbase.models.access.user_role import UserRole
from modbase.repositories.base import BaseRepository
from modbase.repositories.relationships import Relationship

class RoleRepository(BaseRepository[Role]):
    model = Role
    sortable = ("sort",)
    filterable = ("all", "sort", "permissions.name", "permissions.id")
    fillable = ("name", "all", "sort")
    relationships = {
        "permissions": Relationship.many_to_many(Permission, RolePermission, "role_id", "permission_id"),
    }

    async def find_by_name(self, name: str) -> Optional[Role]:
        result = await self.session.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def destroy(self, id: Any) -> bool:
        role = await self.find(id)
        if role.name == settings.ACCESS_SUPER_ROLE:
            raise ValidationError(f"The {role.name} role can not be deleted.")

        users = await self.session.scalar(
            select(func.count()).select_from(UserRole).where(UserRole.role_id == role.id)
        )
        if users:
            raise ValidationError("A role with associated users can not be deleted.")
        return await super().destroy(id)
