"""In-process change feed used to trigger re-fetches after writes."""

import logging
from collections import defaultdict
from typing import Any, Callable

from couplebucks.domain.entities import ChangeEvent, ChangeType

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[ChangeEvent], None]


class Subscription:
    """Handle returned by ChangeFeed.subscribe."""

    def __init__(self, feed: "ChangeFeed", key: tuple[int, str], callback: ChangeCallback):
        self._feed = feed
        self._key = key
        self._callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        """Stop receiving events. Safe to call more than once."""
        if self.active:
            self._feed._remove(self._key, self._callback)
            self.active = False


class ChangeFeed:
    """Per-(couple, table) publish/subscribe of row changes.

    Events carry the changed row only as a hint; subscribers are expected to
    reload the whole affected collection rather than patch local state.
    """

    def __init__(self) -> None:
        self._subscribers: dict[tuple[int, str], list[ChangeCallback]] = defaultdict(list)

    def subscribe(self, couple_id: int, table: str, callback: ChangeCallback) -> Subscription:
        """Register callback for changes to table within couple_id."""
        key = (couple_id, table)
        self._subscribers[key].append(callback)
        return Subscription(self, key, callback)

    def publish(self, couple_id: int, table: str, event_type: ChangeType, row: Any = None) -> None:
        """Deliver an event to every subscriber of (couple_id, table).

        A failing subscriber is logged and does not stop delivery to the others.
        """
        event = ChangeEvent(couple_id=couple_id, table=table, event_type=event_type, row=row)
        for callback in list(self._subscribers.get((couple_id, table), ())):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Change subscriber failed for %s on couple %s", table, couple_id
                )

    def subscriber_count(self, couple_id: int, table: str) -> int:
        return len(self._subscribers.get((couple_id, table), ()))

    def _remove(self, key: tuple[int, str], callback: ChangeCallback) -> None:
        callbacks = self._subscribers.get(key)
        if callbacks and callback in callbacks:
            callbacks.remove(callback)
        if not callbacks:
            self._subscribers.pop(key, None)
