"""
In-process change notifications.

Services publish after a successful commit; subscribers (the websocket stream,
tests) register per table with an optional row filter and get back an
unsubscribe handle.
"""
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

TABLES = ("hospitals", "bookings", "emergency_requests")
# Tables whose rows carry a status column
STATUS_TABLES = ("bookings", "emergency_requests")

ChangeCallback = Callable[[dict], None]


class ChangeFeed:
    def __init__(self):
        self._subscribers: dict[str, list[tuple[ChangeCallback, dict]]] = {t: [] for t in TABLES}

    def subscribe(
        self,
        table: str,
        callback: ChangeCallback,
        row_filter: Optional[dict] = None,
    ) -> Callable[[], None]:
        if table not in self._subscribers:
            raise ValueError(f"Unknown table {table!r}")
        entry = (callback, dict(row_filter or {}))
        self._subscribers[table].append(entry)

        def unsubscribe() -> None:
            try:
                self._subscribers[table].remove(entry)
            except ValueError:
                pass  # already removed

        return unsubscribe

    @staticmethod
    def status_filter(table: str, status: Optional[str]) -> Optional[dict]:
        """Row filter for a status query parameter; hospitals have no status to match."""
        if not status:
            return None
        if table not in STATUS_TABLES:
            raise ValueError(f"{table!r} rows have no status")
        return {"status": status}

    def publish(self, table: str, event: str, row: dict) -> int:
        """Deliver an event to matching subscribers; returns how many received it."""
        delivered = 0
        for callback, row_filter in list(self._subscribers.get(table, [])):
            if any(row.get(k) != v for k, v in row_filter.items()):
                continue
            try:
                callback({"table": table, "event": event, "row": row})
                delivered += 1
            except Exception:
                logger.exception(f"[ChangeFeed] subscriber failed on {table}/{event}")
        return delivered


change_feed = ChangeFeed()
