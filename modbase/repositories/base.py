"""
Generic repository over one SQLAlchemy model.

Subclasses declare what callers may touch:

    class PostRepository(BaseRepository[Post]):
        model = Post
        sortable = ("created_at",)
        filterable = ("category_id", "tags.slug", "search")
        relationships = {"tags": Relationship.many_to_many(Tag, PostTag, "post_id", "tag_id")}

        def filter_handlers(self):
            return {"search": self.filter_by_search}

Filters and sort are chainable and stick to the instance, which is meant
to live for a single request:

    posts = await PostRepository(session).add_filter("active", True).sort("name").paginate(20)

Unknown filter keys, sort fields and relationship names are ignored.
Writes run in one transaction: any failure rolls back and re-raises.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Generic, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from modbase.core.config import settings
from modbase.core.exceptions import NotFoundError
from modbase.repositories.filters import UNSET, FilterBuilder
from modbase.repositories.relationships import Relationship, SyncResult, coerce_ids

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType")

AttachHandler = Callable[[Any, List[Any], bool], Awaitable[Any]]

WITHOUT_TRASHED = "without"
WITH_TRASHED = "with"
ONLY_TRASHED = "only"

DEFAULT_SORTABLE = ("id", "slug", "name")
DEFAULT_FILTERABLE = ("id", "slug", "name", "active")


class BaseRepository(Generic[ModelType]):
    model: Type[ModelType] = None
    sortable: Tuple[str, ...] = ()
    filterable: Tuple[str, ...] = ()
    relationships: Dict[str, Relationship] = {}
    # None means every column except the guarded ones
    fillable: Optional[Tuple[str, ...]] = None
    guarded: Tuple[str, ...] = ("id", "created_at", "updated_at", "deleted_at")

    def __init__(self, session: AsyncSession):
        if self.model is None:
            raise TypeError(f"{type(self).__name__} must declare a model")

        self.session = session
        self.relationships = dict(self.relationships)
        self.sortable = [*self._existing_columns(DEFAULT_SORTABLE), *self.sortable]
        self.filters = FilterBuilder(
            filterable=[*self._existing_columns(DEFAULT_FILTERABLE), *self.filterable],
            handlers=self.filter_handlers(),
        )
        self.attach = dict(self.attach_handlers())
        self.sort_by = self.primary_key
        self.sort_order = "desc"
        self.trashed = WITHOUT_TRASHED

    # ------------------------------------------------------------------
    # Strategy tables, overridden by subclasses
    # ------------------------------------------------------------------
    def filter_handlers(self) -> Dict[str, Callable[[Any], Any]]:
        return {}

    def attach_handlers(self) -> Dict[str, AttachHandler]:
        return {}

    # ------------------------------------------------------------------
    # Introspection helpers
    # ------------------------------------------------------------------
    @property
    def model_name(self) -> str:
        return self.model.__name__

    @property
    def primary_key(self) -> str:
        return self.model.__table__.primary_key.columns.keys()[0]

    @property
    def columns(self) -> List[str]:
        return list(self.model.__table__.columns.keys())

    @property
    def soft_deletes(self) -> bool:
        return "deleted_at" in self.columns

    def _existing_columns(self, names: Sequence[str]) -> List[str]:
        columns = self.columns
        return [name for name in names if name in columns]

    def fillable_data(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        allowed = self.fillable if self.fillable is not None else [
            name for name in self.columns if name not in self.guarded
        ]
        return {key: value for key, value in data.items() if key in allowed and key not in self.relationships}

    # ------------------------------------------------------------------
    # Query building
    # ------------------------------------------------------------------
    def query(self):
        return select(self.model)

    def add_filter(self, key: str, operator: Any, value: Any = UNSET) -> "BaseRepository[ModelType]":
        self.filters.add(key, operator, value)
        return self

    def sort(self, by: Optional[str], order: Optional[str] = "asc") -> "BaseRepository[ModelType]":
        if by in self.sortable:
            self.sort_by = by or self.primary_key
            order = (order or "asc").lower()
            self.sort_order = order if order in ("asc", "desc") else "asc"
        return self

    def with_trashed(self) -> "BaseRepository[ModelType]":
        self.trashed = WITH_TRASHED
        return self

    def only_trashed(self) -> "BaseRepository[ModelType]":
        self.trashed = ONLY_TRASHED
        return self

    def reset(self) -> "BaseRepository[ModelType]":
        self.filters.clear()
        self.sort_by = self.primary_key
        self.sort_order = "desc"
        self.trashed = WITHOUT_TRASHED
        return self

    def apply_trashed_scope(self, query):
        if not self.soft_deletes:
            return query
        deleted_at = self.model.__table__.c.deleted_at
        if self.trashed == WITHOUT_TRASHED:
            return query.where(deleted_at.is_(None))
        if self.trashed == ONLY_TRASHED:
            return query.where(deleted_at.is_not(None))
        return query

    def apply_filters(self, query):
        query = self.filters.apply(query, self.model, self.relationships)
        return self.apply_trashed_scope(query)

    def apply_sort(self, query):
        column = self.model.__table__.c[self.sort_by]
        return query.order_by(column.desc() if self.sort_order == "desc" else column.asc())

    def filter_and_sort(self, query):
        return self.apply_sort(self.apply_filters(query))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def find(self, id: Any) -> ModelType:
        query = self.filter_and_sort(self.query()).where(
            self.model.__table__.c[self.primary_key] == id
        )
        result = await self.session.execute(query)
        item = result.scalars().first()
        if item is None:
            raise NotFoundError(f"{self.model_name} {id} not found")
        return item

    async def all(self) -> List[ModelType]:
        result = await self.session.execute(self.filter_and_sort(self.query()))
        return list(result.scalars().all())

    async def paginate(self, per_page: Optional[int] = None, page: int = 1) -> Dict[str, Any]:
        per_page = per_page or settings.DEFAULT_PAGE_SIZE
        page = max(page, 1)

        filtered = self.apply_filters(self.query())
        total = await self.session.scalar(
            select(func.count()).select_from(filtered.order_by(None).subquery())
        )

        skip = (page - 1) * per_page
        result = await self.session.execute(
            self.apply_sort(filtered).offset(skip).limit(per_page)
        )

        return {
            "page_index": page,
            "page_size": per_page,
            "count": total or 0,
            "data": list(result.scalars().all()),
        }

    async def list_all(self, name_column: str = "name") -> Dict[Any, Any]:
        table = self.model.__table__
        query = self.filter_and_sort(
            select(table.c[self.primary_key], table.c[name_column])
        )
        result = await self.session.execute(query)
        return {row[0]: row[1] for row in result.all()}

    async def find_by_slug(self, slug: str) -> Optional[ModelType]:
        query = self.filter_and_sort(self.query()).where(self.model.__table__.c.slug == slug)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_by_many(self, ids: Sequence[Any]) -> List[ModelType]:
        ids = list(ids)
        if not ids:
            return []
        query = self.filter_and_sort(self.query()).where(
            self.model.__table__.c[self.primary_key].in_(ids)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def selected_relationships(self, id: Any) -> Dict[str, List[Any]]:
        """Ids currently linked to the item, per declared relationship."""
        item = await self.find(id)
        return {
            name: await relationship.linked_ids(self.session, item)
            for name, relationship in self.relationships.items()
        }

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def create(self, data: Optional[Mapping[str, Any]] = None) -> ModelType:
        data = dict(data or {})
        try:
            item = self.model(**self.fillable_data(data))
            self.session.add(item)
            await self.session.flush()
            await self.sync_relationships(item, data, new=True)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error creating {self.model_name}: {str(e)}")
            raise

        await self.session.refresh(item)
        logger.info(f"{self.model_name} created: {item.id}")
        return item

    async def update(self, id: Any, data: Optional[Mapping[str, Any]] = None, full_update: bool = False) -> ModelType:
        data = dict(data or {})
        item = await self.find(id)
        try:
            for key, value in self.fillable_data(data).items():
                setattr(item, key, value)
            await self.session.flush()
            await self.sync_relationships(item, data, full_update=full_update)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error updating {self.model_name} {id}: {str(e)}")
            raise

        await self.session.refresh(item)
        logger.info(f"{self.model_name} updated: {item.id}")
        return item

    async def destroy(self, id: Any) -> bool:
        item = await self.find(id)
        try:
            if self.soft_deletes:
                item.deleted_at = datetime.now(timezone.utc)
            else:
                await self.session.delete(item)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error deleting {self.model_name} {id}: {str(e)}")
            raise

        logger.info(f"{self.model_name} deleted: {id}")
        return True

    async def _find_trashed(self, id: Any) -> ModelType:
        previous = self.trashed
        self.trashed = ONLY_TRASHED
        try:
            return await self.find(id)
        finally:
            self.trashed = previous

    async def restore(self, id: Any) -> ModelType:
        if not self.soft_deletes:
            raise NotFoundError(f"{self.model_name} {id} not found")

        item = await self._find_trashed(id)
        try:
            item.deleted_at = None
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error restoring {self.model_name} {id}: {str(e)}")
            raise

        await self.session.refresh(item)
        logger.info(f"{self.model_name} restored: {id}")
        return item

    async def force_delete(self, id: Any) -> bool:
        """Permanently delete. Soft-deleting models must be trashed first."""
        item = await self._find_trashed(id) if self.soft_deletes else await self.find(id)
        try:
            await self.session.delete(item)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error permanently deleting {self.model_name} {id}: {str(e)}")
            raise

        logger.info(f"{self.model_name} permanently deleted: {id}")
        return True

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------
    async def sync_relationships(
        self,
        item: ModelType,
        data: Mapping[str, Any],
        relationships: Optional[Sequence[str]] = None,
        new: bool = False,
        full_update: bool = False,
    ) -> Dict[str, SyncResult]:
        """
        Reconcile declared relationships with `data`.

        A relationship is synced when its key is present in `data`, or for
        every declared relationship when `full_update` is set (a PUT), in
        which case missing keys mean "no links".  Attach handlers run on
        creation even without a key, so they can attach defaults.
        """
        names = list(relationships or [*self.relationships, *self.attach])
        results: Dict[str, SyncResult] = {}

        for name in dict.fromkeys(names):
            handler = self.attach.get(name)
            present = name in data
            if not (present or full_update or (new and handler is not None)):
                continue

            ids = coerce_ids(data.get(name)) if present else []

            if handler is not None:
                results[name] = await handler(item, ids, new)
            elif name in self.relationships:
                results[name] = await self.relationships[name].sync(self.session, item, ids)
            else:
                logger.debug(f"{self.model_name} has no relationship '{name}', skipped")

        return results
