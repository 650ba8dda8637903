import logging
from typing import Dict, List, Set
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from modbase.core.exceptions import ValidationError
from modbase.models.access.permission_dependency import PermissionDependency

logger = logging.getLogger(__name__)

class PermissionDependencyRepository:
    """Edges of the permission dependency graph; cycles are rejected on write."""

    def __init__(self, session: AsyncSession, autocommit: bool = True):
        self.session = session
        self.autocommit = autocommit

    async def graph(self) -> Dict[int, Set[int]]:
        result = await self.session.execute(
            select(PermissionDependency.permission_id, PermissionDependency.dependency_id)
        )
        edges: Dict[int, Set[int]] = {}
        for permission_id, dependency_id in result.all():
            edges.setdefault(permission_id, set()).add(dependency_id)
        return edges

    async def dependency_ids(self, permission_id: int) -> List[int]:
        result = await self.session.execute(
            select(PermissionDependency.dependency_id)
            .where(PermissionDependency.permission_id == permission_id)
            .order_by(PermissionDependency.dependency_id)
        )
        return list(result.scalars().all())

    async def creates_cycle(self, permission_id: int, dependency_id: int) -> bool:
        """True when dependency_id already (transitively) depends on permission_id."""
        if permission_id == dependency_id:
            return True

        edges = await self.graph()
        stack = [dependency_id]
        seen: Set[int] = set()
        while stack:
            current = stack.pop()
            if current == permission_id:
                return True
            if current in seen:
                continue
            seen.add(current)
            stack.extend(edges.get(current, ()))
        return False

    async def create(self, permission_id: int, dependency_id: int) -> PermissionDependency:
        existing = await self.session.execute(
            select(PermissionDependency).where(
                PermissionDependency.permission_id == permission_id,
                PermissionDependency.dependency_id == dependency_id,
            )
        )
        edge = existing.scalar_one_or_none()
        if edge is not None:
            return edge

        if await self.creates_cycle(permission_id, dependency_id):
            raise ValidationError(
                f"Permission {permission_id} cannot depend on {dependency_id}: dependency cycle"
            )

        edge = PermissionDependency(permission_id=permission_id, dependency_id=dependency_id)
        self.session.add(edge)
        await self.session.flush()
        if self.autocommit:
            await self.session.commit()
        logger.debug(f"Permission dependency added: {permission_id} -> {dependency_id}")
        return edge

    async def remove(self, permission_id: int, dependency_id: int) -> None:
        await self.session.execute(
            delete(PermissionDependency).where(
                PermissionDependency.permission_id == permission_id,
                PermissionDependency.dependency_id == dependency_id,
            )
        )
        if self.autocommit:
            await self.session.commit()

    async def clear(self, permission_id: int) -> int:
        """Remove every dependency of a permission, returning how many were removed."""
        result = await self.session.execute(
            delete(PermissionDependency).where(PermissionDependency.permission_id == permission_id)
        )
        if self.autocommit:
            await self.session.commit()
        return result.rowcount or 0
