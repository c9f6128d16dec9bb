"""
Time-bound, size-bounded cache for read queries.
"""
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)


class TimedCache:
    """
    Mapping of cache key -> (value, stored_at).

    A value is served while ``now - stored_at < ttl``; the TTL is supplied by
    the reader, so the same key can be read with different freshness
    requirements. Once ``max_entries`` is reached the least recently used
    entry is evicted.
    """

    def __init__(self, max_entries: int = 256, clock: Callable[[], float] = time.monotonic):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[Any, float]]" = OrderedDict()
        self._lock = threading.Lock()

    def get_or_fetch(self, key: str, fetch_fn: Callable[[], Any], ttl: float) -> Any:
        now = self._clock()
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None and now - cached[1] < ttl:
                self._entries.move_to_end(key)
                logger.debug(f"Using cached data for {key}")
                return cached[0]

        # Fetch outside the lock; errors propagate and nothing is stored.
        value = fetch_fn()

        with self._lock:
            self._entries[key] = (value, now)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted cache key {evicted}")
        return value

    def clear(self, keys: Optional[Iterable[str]] = None) -> None:
        """Remove the given keys, or every entry when ``keys`` is empty or None."""
        keys = list(keys or [])
        with self._lock:
            if keys:
                for key in keys:
                    self._entries.pop(key, None)
                logger.debug(f"Cleared specific cache keys: {', '.join(keys)}")
            else:
                self._entries.clear()
                logger.debug("Cleared all cache")

    def invalidate_prefix(self, *prefixes: str) -> int:
        """Remove every key starting with one of ``prefixes``; return how many."""
        if not prefixes:
            return 0
        with self._lock:
            doomed = [key for key in self._entries if key.startswith(prefixes)]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug(f"Invalidated {len(doomed)} cache keys for {', '.join(prefixes)}")
        return len(doomed)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
