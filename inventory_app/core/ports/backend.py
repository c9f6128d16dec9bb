"""
Port for the hosted relational backend.

Services describe what they want with a ``Query`` and hand it to a
``BackendPort``; the adapter decides how to run it.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

Row = Dict[str, Any]

FILTER_OPERATORS = (
    "eq", "neq", "gt", "gte", "lt", "lte", "like", "ilike", "in", "is_null", "not_null",
)


@dataclass(frozen=True)
class Filter:
    column: str
    op: str
    value: Any = None


@dataclass
class Query:
    """
    Chainable description of a select.

    Example:
        Query().eq("warehouse_id", wid).is_null("deleted_at").order("name").range(0, 19)
    """
    filters: List[Filter] = field(default_factory=list)
    search_columns: Tuple[str, ...] = ()
    search_term: Optional[str] = None
    order_by: List[Tuple[str, bool]] = field(default_factory=list)
    offset: Optional[int] = None
    limit: Optional[int] = None
    with_count: bool = False

    def _add(self, column: str, op: str, value: Any = None) -> "Query":
        self.filters.append(Filter(column, op, value))
        return self

    def eq(self, column: str, value: Any) -> "Query":
        return self._add(column, "eq", value)

    def neq(self, column: str, value: Any) -> "Query":
        return self._add(column, "neq", value)

    def gt(self, column: str, value: Any) -> "Query":
        return self._add(column, "gt", value)

    def gte(self, column: str, value: Any) -> "Query":
        return self._add(column, "gte", value)

    def lt(self, column: str, value: Any) -> "Query":
        return self._add(column, "lt", value)

    def lte(self, column: str, value: Any) -> "Query":
        return self._add(column, "lte", value)

    def like(self, column: str, pattern: str) -> "Query":
        return self._add(column, "like", pattern)

    def ilike(self, column: str, pattern: str) -> "Query":
        return self._add(column, "ilike", pattern)

    def in_(self, column: str, values: Sequence[Any]) -> "Query":
        return self._add(column, "in", list(values))

    def is_null(self, column: str) -> "Query":
        return self._add(column, "is_null")

    def not_null(self, column: str) -> "Query":
        return self._add(column, "not_null")

    def search(self, columns: Sequence[str], term: Optional[str]) -> "Query":
        """Case-insensitive substring match on any of ``columns``."""
        if term:
            self.search_columns = tuple(columns)
            self.search_term = term
        return self

    def order(self, column: str, ascending: bool = True) -> "Query":
        self.order_by.append((column, ascending))
        return self

    def range(self, start: int, end: int) -> "Query":
        """Inclusive row range, as in ``range(0, 19)`` for the first twenty rows."""
        self.offset = start
        self.limit = end - start + 1
        return self

    def count(self) -> "Query":
        self.with_count = True
        return self


@dataclass
class SelectResult:
    rows: List[Row]
    count: Optional[int] = None


class BackendPort(ABC):
    @abstractmethod
    def select(self, table: str, query: Optional[Query] = None) -> SelectResult:
        pass

    @abstractmethod
    def insert(self, table: str, values: Row) -> Row:
        pass

    @abstractmethod
    def update(self, table: str, values: Row, query: Query) -> List[Row]:
        pass

    @abstractmethod
    def delete(self, table: str, query: Query) -> List[Row]:
        pass

    @abstractmethod
    def upsert(self, table: str, rows: List[Row]) -> List[Row]:
        pass
