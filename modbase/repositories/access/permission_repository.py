from typing import Any, List, Mapping, Optional
from sqlalchemy import select
from modbase.models.access.permission import Permission
from modbase.models.access.permission_dependency import PermissionDependency
from modbase.repositories.access.permission_dependency_repository import PermissionDependencyRepository
from modbase.repositories.base import BaseRepository
from modbase.repositories.relationships import Relationship, SyncResult

class PermissionRepository(BaseRepository[Permission]):
    model = Permission
    sortable = ("sort", "display_name")
    filterable = ("group_id", "system", "display_name")
    fillable = ("name", "display_name", "system", "group_id", "sort")
    relationships = {
        "dependencies": Relationship.many_to_many(Permission, PermissionDependency, "permission_id", "dependency_id"),
    }

    def attach_handlers(self):
        return {"dependencies": self.attach_dependencies}

    async def attach_dependencies(self, item: Permission, ids: List[Any], new: bool) -> Optional[SyncResult]:
        """Replace the dependency edges of `item`, rejecting cycles."""
        if new and not ids:
            return None

        dependencies = PermissionDependencyRepository(self.session, autocommit=False)
        old = await dependencies.dependency_ids(item.id)
        wanted = await self.relationships["dependencies"].existing_ids(self.session, ids)

        for dependency_id in old:
            if dependency_id not in wanted:
                await dependencies.remove(item.id, dependency_id)
        for dependency_id in wanted:
            if dependency_id not in old:
                await dependencies.create(item.id, dependency_id)

        return SyncResult(
            kept=[value for value in wanted if value in old],
            removed=[value for value in old if value not in wanted],
            added=[value for value in wanted if value not in old],
        )

    async def update(self, id: Any, data: Optional[Mapping[str, Any]] = None, full_update: bool = False) -> Permission:
        # Names are stable identifiers used by gates and templates
        data = {key: value for key, value in dict(data or {}).items() if key != "name"}
        return await super().update(id, data, full_update=full_update)

    async def find_by_name(self, name: str) -> Optional[Permission]:
        result = await self.session.execute(select(Permission).where(Permission.name == name))
        return result.scalar_one_or_none()
