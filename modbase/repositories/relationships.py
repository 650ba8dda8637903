"""
Relationship descriptors and the sync algorithm used by repositories.

Each repository declares its relationships explicitly instead of
introspecting ORM metadata:

    relationships = {
        "category": Relationship.belongs_to(Category, "category_id"),
        "posts": Relationship.has_many(Post, "category_id"),
        "tags": Relationship.many_to_many(Tag, PostTag, "post_id", "tag_id"),
    }

`sync()` reconciles the linked rows of one item with a desired id list and
reports what was kept, removed and added.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, NamedTuple, Optional

from sqlalchemy import and_, delete, exists, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

HAS_MANY = "has_many"
BELONGS_TO = "belongs_to"
MANY_TO_MANY = "many_to_many"


class SyncResult(NamedTuple):
    kept: List[Any]
    removed: List[Any]
    added: List[Any]


def coerce_ids(values: Any) -> List[Any]:
    """Normalize incoming ids: drop empty values, cast numeric strings, dedupe."""
    if values is None:
        return []
    if not isinstance(values, (list, tuple, set, frozenset)):
        values = [values]

    ids: List[Any] = []
    for value in values:
        if value in (None, "", "0", 0, False):
            continue
        if isinstance(value, str) and value.strip().isdigit():
            value = int(value.strip())
        if value not in ids:
            ids.append(value)
    return ids


def _visible(model):
    """Clause hiding soft-deleted rows, or None for models without soft delete."""
    deleted_at = model.__table__.c.get("deleted_at")
    return deleted_at.is_(None) if deleted_at is not None else None


def _where(*clauses):
    return and_(*[clause for clause in clauses if clause is not None])


@dataclass(frozen=True)
class Relationship:
    kind: str
    related: Any
    foreign_key: Optional[str] = None
    secondary: Any = None
    local_key: Optional[str] = None
    remote_key: Optional[str] = None

    @classmethod
    def has_many(cls, related, foreign_key: str) -> "Relationship":
        """Rows of `related` point back at us through `foreign_key`."""
        return cls(kind=HAS_MANY, related=related, foreign_key=foreign_key)

    @classmethod
    def belongs_to(cls, related, foreign_key: str) -> "Relationship":
        """We point at one row of `related` through our own `foreign_key`."""
        return cls(kind=BELONGS_TO, related=related, foreign_key=foreign_key)

    @classmethod
    def many_to_many(cls, related, secondary, local_key: str, remote_key: str) -> "Relationship":
        """Linked through a pivot table (`secondary` may be a model or a Table)."""
        table = getattr(secondary, "__table__", secondary)
        return cls(
            kind=MANY_TO_MANY,
            related=related,
            secondary=table,
            local_key=local_key,
            remote_key=remote_key,
        )

    @property
    def related_table(self):
        return self.related.__table__

    def existence(self, model, condition):
        """EXISTS clause: `model` rows with at least one related row matching `condition`."""
        related = self.related_table
        owner = model.__table__

        if self.kind == HAS_MANY:
            clause = _where(related.c[self.foreign_key] == owner.c.id, _visible(self.related), condition)
        elif self.kind == BELONGS_TO:
            clause = _where(related.c.id == owner.c[self.foreign_key], _visible(self.related), condition)
        else:
            pivot = self.secondary
            clause = _where(
                pivot.c[self.local_key] == owner.c.id,
                pivot.c[self.remote_key] == related.c.id,
                _visible(self.related),
                condition,
            )
        return exists().where(clause)

    async def linked_ids(self, session: AsyncSession, item) -> List[Any]:
        related = self.related_table

        if self.kind == BELONGS_TO:
            value = getattr(item, self.foreign_key)
            return [value] if value is not None else []

        if self.kind == HAS_MANY:
            query = select(related.c.id).where(
                _where(related.c[self.foreign_key] == item.id, _visible(self.related))
            )
        else:
            pivot = self.secondary
            query = select(pivot.c[self.remote_key]).where(pivot.c[self.local_key] == item.id)

        result = await session.execute(query.order_by(query.selected_columns[0]))
        return list(result.scalars().all())

    async def existing_ids(self, session: AsyncSession, ids: Iterable[Any]) -> List[Any]:
        """Subset of `ids` that resolve to visible related rows, in request order."""
        ids = list(ids)
        if not ids:
            return []
        related = self.related_table
        result = await session.execute(
            select(related.c.id).where(_where(related.c.id.in_(ids), _visible(self.related)))
        )
        found = set(result.scalars().all())
        return [value for value in ids if value in found]

    async def sync(self, session: AsyncSession, item, values: Any) -> SyncResult:
        ids = coerce_ids(values)

        if self.kind == BELONGS_TO:
            return await self._sync_belongs_to(session, item, ids)

        old = await self.linked_ids(session, item)
        kept = [value for value in ids if value in old]
        removed = [value for value in old if value not in ids]
        added = await self.existing_ids(session, [value for value in ids if value not in old])

        if self.kind == HAS_MANY:
            await self._sync_has_many(session, item, removed, added)
        else:
            await self._sync_pivot(session, item, removed, added)

        logger.debug(
            f"Synced {self.kind} {self.related.__name__} for {type(item).__name__} {item.id}: "
            f"kept={kept} removed={removed} added={added}"
        )
        return SyncResult(kept=kept, removed=removed, added=added)

    async def _sync_has_many(self, session: AsyncSession, item, removed, added) -> None:
        related = self.related
        if removed:
            await session.execute(
                update(related).where(related.__table__.c.id.in_(removed)).values({self.foreign_key: None})
            )
        if added:
            await session.execute(
                update(related).where(related.__table__.c.id.in_(added)).values({self.foreign_key: item.id})
            )

    async def _sync_pivot(self, session: AsyncSession, item, removed, added) -> None:
        pivot = self.secondary
        if removed:
            await session.execute(
                delete(pivot).where(
                    pivot.c[self.local_key] == item.id,
                    pivot.c[self.remote_key].in_(removed),
                )
            )
        if added:
            await session.execute(
                insert(pivot),
                [{self.local_key: item.id, self.remote_key: value} for value in added],
            )

    async def _sync_belongs_to(self, session: AsyncSession, item, ids) -> SyncResult:
        if not ids:
            return SyncResult(kept=[], removed=[], added=[])

        value = ids[0]
        current = getattr(item, self.foreign_key)
        if value == current:
            return SyncResult(kept=[value], removed=[], added=[])

        # unknown or trashed targets leave the foreign key untouched
        if not await self.existing_ids(session, [value]):
            logger.debug(f"Skipped unknown {self.related.__name__} {value} for {type(item).__name__} {item.id}")
            return SyncResult(kept=[], removed=[], added=[])

        setattr(item, self.foreign_key, value)
        await session.flush()
        return SyncResult(kept=[], removed=[current] if current is not None else [], added=[value])
