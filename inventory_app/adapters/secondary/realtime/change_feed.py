"""
In-process realtime change feed.

Subscribers are called synchronously in the publishing thread. A failing
subscriber is logged and does not stop delivery to the others.
"""
import logging
import threading
from typing import Callable, List, Tuple

from inventory_app.core.ports.external import ChangeCallback, ChangeEvent, RealtimePort

logger = logging.getLogger(__name__)

WILDCARD = "*"


class ChangeFeed(RealtimePort):
    def __init__(self):
        self._subscribers: List[Tuple[str, str, ChangeCallback]] = []
        self._lock = threading.Lock()

    def subscribe(self, table: str, event: str, callback: ChangeCallback) -> Callable[[], None]:
        entry = (table, event.upper() if event != WILDCARD else event, callback)
        with self._lock:
            self._subscribers.append(entry)
        logger.debug(f"Subscribed to {event} on {table}")

        def unsubscribe() -> None:
            with self._lock:
                if entry in self._subscribers:
                    self._subscribers.remove(entry)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            targets = [
                callback for table, kind, callback in self._subscribers
                if table in (WILDCARD, event.table) and kind in (WILDCARD, event.event)
            ]
        for callback in targets:
            try:
                callback(event)
            except Exception:
                logger.exception(f"Change subscriber failed for {event.event} on {event.table}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)
