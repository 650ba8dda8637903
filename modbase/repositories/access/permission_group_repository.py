from typing import Any, Mapping, Optional
from sqlalchemy import select
from modbase.core.exceptions import ValidationError
from modbase.models.access.permission import Permission
from modbase.models.access.permission_group import PermissionGroup
from modbase.repositories.base import BaseRepository
from modbase.repositories.relationships import Relationship

class PermissionGroupRepository(BaseRepository[PermissionGroup]):
    model = PermissionGroup
    sortable = ("sort",)
    filterable = ("parent_id", "permissions.name")
    fillable = ("name", "sort", "parent_id")
    relationships = {
        "permissions": Relationship.has_many(Permission, "group_id"),
    }

    async def validate_parent(self, group_id: Optional[int], parent_id: Optional[int]) -> None:
        """The parent must exist and must not be the group itself or one of its descendants."""
        if parent_id is None:
            return

        seen = set()
        current = parent_id
        while current is not None:
            if current == group_id:
                raise ValidationError("A permission group cannot be nested under itself")
            if current in seen:
                raise ValidationError("Permission group tree contains a cycle")
            seen.add(current)

            result = await self.session.execute(
                select(PermissionGroup.parent_id).where(PermissionGroup.id == current)
            )
            row = result.first()
            if row is None:
                if current == parent_id:
                    raise ValidationError("Parent permission group not found")
                break
            current = row[0]

    async def create(self, data: Optional[Mapping[str, Any]] = None) -> PermissionGroup:
        data = dict(data or {})
        await self.validate_parent(None, data.get("parent_id"))
        return await super().create(data)

    async def update(self, id: Any, data: Optional[Mapping[str, Any]] = None, full_update: bool = False) -> PermissionGroup:
        data = dict(data or {})
        if "parent_id" in data:
            await self.validate_parent(id, data["parent_id"])
        return await super().update(id, data, full_update=full_update)

    async def roots(self):
        return await self.add_filter("parent_id", "null", None).sort("sort", "asc").all()
