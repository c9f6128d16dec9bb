"""
Shared plumbing for the entity services.

Reads are forgiving: a backend failure is recorded with the error handler
and the caller gets an empty default. Writes are strict: the failure is
recorded and re-raised, and nothing is invalidated.
"""
import json
import logging
import math
from typing import Any, Callable, Dict, Iterable, Optional, TypeVar

from inventory_app.core.cache import TimedCache
from inventory_app.core.domain.models import Page
from inventory_app.core.errors import ErrorHandler
from inventory_app.core.ports.backend import BackendPort

logger = logging.getLogger(__name__)

T = TypeVar("T")


def total_pages(count: int, page_size: int) -> int:
    if count <= 0 or page_size <= 0:
        return 0
    return math.ceil(count / page_size)


def page_offset(page: int, page_size: int) -> int:
    return (max(page, 1) - 1) * page_size


def page_range(page: int, page_size: int):
    """Inclusive (start, end) row range for ``Query.range``."""
    start = page_offset(page, page_size)
    return start, start + page_size - 1


def make_cache_key(entity: str, **params: Any) -> str:
    return f"{entity}:" + json.dumps(params, sort_keys=True, default=str)


class DataAccess:
    def __init__(self, backend: BackendPort, cache: TimedCache, errors: ErrorHandler, default_ttl: float = 300):
        self.backend = backend
        self.cache = cache
        self.errors = errors
        self.default_ttl = default_ttl

    def cached(self, key: str, fetch_fn: Callable[[], T], ttl: Optional[float] = None) -> T:
        if ttl is None:
            return fetch_fn()
        return self.cache.get_or_fetch(key, fetch_fn, ttl)

    def read(self, fetch_fn: Callable[[], T], default: T, context: Optional[Dict[str, Any]] = None) -> T:
        try:
            return fetch_fn()
        except Exception as exc:
            self.errors.handle(exc, context)
            return default

    def mutate(
        self,
        fn: Callable[[], T],
        invalidates: Iterable[str] = (),
        context: Optional[Dict[str, Any]] = None,
    ) -> T:
        try:
            result = fn()
        except Exception as exc:
            self.errors.handle(exc, context)
            raise
        prefixes = tuple(invalidates)
        if prefixes:
            self.cache.invalidate_prefix(*prefixes)
        return result


def to_page(result, page: int, page_size: int, convert: Callable[[Dict[str, Any]], Any] = lambda row: row):
    """Build a ``Page`` from a counted ``SelectResult``."""
    count = result.count if result.count is not None else len(result.rows)
    return Page(
        data=[convert(row) for row in result.rows],
        count=count,
        page=page,
        page_size=page_size,
        total_pages=total_pages(count, page_size),
    )


def empty_page(page: int, page_size: int) -> Page:
    return Page(data=[], count=0, page=page, page_size=page_size, total_pages=0)
