"""
Declarative, allow-listed query filters.

A `FilterBuilder` collects criteria registered through `add()` and turns
them into WHERE clauses on a SQLAlchemy `Select`.  Keys that are not
allow-listed are ignored, so request parameters can be forwarded without
letting callers filter on arbitrary columns.

Supported operators:
    =, ==           equality (the default when no operator is given)
    in, !in         membership; the value must be a list, tuple or set
    null, !null     IS NULL / IS NOT NULL; the value is ignored
    anything else   passed through to the column (>, <, like, ilike, ...)

Keys of the form `relation.field` are applied as an EXISTS subquery
through the repository's relationship descriptors.
"""

import logging
import operator as op
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional

from sqlalchemy import ColumnElement

from modbase.core.exceptions import InvalidFilterValueError

logger = logging.getLogger(__name__)

UNSET = object()

LIST_OPERATORS = ("in", "!in")

_COMPARISONS: Dict[str, Callable[[Any, Any], Any]] = {
    "!=": op.ne,
    "<>": op.ne,
    ">": op.gt,
    ">=": op.ge,
    "<": op.lt,
    "<=": op.le,
    "like": lambda column, value: column.like(value),
    "not like": lambda column, value: column.not_like(value),
    "ilike": lambda column, value: column.ilike(value),
}


class Filter(NamedTuple):
    key: str
    operator: str
    value: Any

    @property
    def relationship(self) -> Optional[str]:
        return self.key.split(".", 1)[0] if "." in self.key else None

    @property
    def field(self) -> str:
        return self.key.split(".", 1)[1] if "." in self.key else self.key


def build_condition(column, operator: Optional[str], value: Any) -> ColumnElement:
    """Translate one operator/value pair into a clause on `column`."""
    name = (operator or "null").lower()

    if name == "null":
        return column.is_(None)
    if name == "!null":
        return column.is_not(None)
    if name == "in":
        return column.in_(list(value))
    if name == "!in":
        return column.not_in(list(value))
    if name in ("=", "=="):
        return column.is_(None) if value is None else column == value
    if name in _COMPARISONS:
        return _COMPARISONS[name](column, value)
    return column.op(operator)(value)


class FilterBuilder:
    """Collects filters for one repository instance."""

    def __init__(
        self,
        filterable: Iterable[str] = (),
        handlers: Optional[Dict[str, Callable[[Any], Any]]] = None,
    ):
        self.filterable = list(dict.fromkeys(filterable))
        self.handlers = dict(handlers or {})
        self.filters: Dict[str, Filter] = {}
        self.conditions: List[ColumnElement] = []

    def allow(self, *keys: str) -> None:
        for key in keys:
            if key not in self.filterable:
                self.filterable.append(key)

    def add(self, key: str, operator: Any, value: Any = UNSET) -> bool:
        """
        Register a filter.  Returns False when the key is not filterable.

        add("name", "foo")         -> name = 'foo'
        add("id", "in", [1, 2])    -> id IN (1, 2)
        """
        if value is UNSET:
            operator, value = "=", operator

        if key not in self.filterable:
            logger.debug(f"Ignoring filter on non-filterable field '{key}'")
            return False

        if str(operator).lower() in LIST_OPERATORS and not isinstance(value, (list, tuple, set, frozenset)):
            raise InvalidFilterValueError()

        handler = self.handlers.get(key)
        if handler is not None:
            handler(value)
        else:
            self.filters[key] = Filter(key=key, operator=operator, value=value)
        return True

    def where(self, *clauses: ColumnElement) -> None:
        """Add raw clauses, used by custom filter handlers."""
        self.conditions.extend(clauses)

    def clear(self) -> None:
        self.filters.clear()
        self.conditions.clear()

    def __len__(self) -> int:
        return len(self.filters) + len(self.conditions)

    def apply(self, query, model, relationships=None):
        relationships = relationships or {}
        table = model.__table__

        for item in self.filters.values():
            if item.relationship is not None:
                relationship = relationships.get(item.relationship)
                if relationship is None:
                    continue
                column = relationship.related.__table__.c.get(item.field)
                if column is None:
                    continue
                condition = build_condition(column, item.operator, item.value)
                query = query.where(relationship.existence(model, condition))
                continue

            column = table.c.get(item.field)
            if column is None:
                logger.debug(f"{model.__name__} has no column '{item.field}', filter skipped")
                continue
            query = query.where(build_condition(column, item.operator, item.value))

        for condition in self.conditions:
            query = query.where(condition)
        return query
