"""Sync events and the dispatcher delivering them to subscribers."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

from .loglevel import ALL_LOG_LEVELS, LogLevel

if TYPE_CHECKING:
    from .job import SyncJob

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogEvent:
    """A single event emitted during a sync run."""

    job: "SyncJob"
    """Job that emitted the event"""

    category: LogLevel
    """Event category (a single LogLevel bit)"""

    message: str
    """Path the event refers to, or an error description"""

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    """Emission time (UTC)"""


EventCallback = Callable[[LogEvent], Any]

# Single-bit categories in emission order of the bit mask
CATEGORIES: tuple[LogLevel, ...] = tuple(
    level for level in LogLevel if level and level & ALL_LOG_LEVELS
)


def _expand(categories: Optional[Iterable[LogLevel]]) -> list[LogLevel]:
    """Expand a category selection into single-bit categories."""
    if categories is None:
        return list(CATEGORIES)
    if isinstance(categories, int):
        return [c for c in CATEGORIES if c & categories]
    selected: list[LogLevel] = []
    for category in categories:
        selected.extend(c for c in CATEGORIES if c & category and c not in selected)
    return selected


class EventDispatcher:
    """Delivers events to callbacks registered per category.

    Callbacks run synchronously, in registration order, on the thread that
    emits the event. A slow callback therefore slows down the sync.
    """

    def __init__(self) -> None:
        self._subscribers: dict[LogLevel, list[EventCallback]] = defaultdict(list)

    def subscribe(
        self,
        callback: EventCallback,
        categories: Optional[Iterable[LogLevel]] = None,
    ) -> None:
        """Register a callback.

        Args:
            callback: Called with each LogEvent of a selected category
            categories: Categories to receive, either a LogLevel mask or an
                iterable of LogLevel values (default: all categories)
        """
        for category in _expand(categories):
            callbacks = self._subscribers[category]
            if callback not in callbacks:
                callbacks.append(callback)

    def unsubscribe(
        self,
        callback: EventCallback,
        categories: Optional[Iterable[LogLevel]] = None,
    ) -> None:
        """Remove a callback from the given categories (default: all)."""
        for category in _expand(categories):
            callbacks = self._subscribers.get(category)
            if callbacks and callback in callbacks:
                callbacks.remove(callback)

    def has_subscribers(self, category: LogLevel) -> bool:
        """Check whether any callback is registered for a category."""
        return bool(self._subscribers.get(category))

    def emit(self, event: LogEvent) -> None:
        """Deliver an event to every callback registered for its category.

        A callback raising an exception is logged and skipped; the remaining
        callbacks still receive the event.
        """
        for callback in list(self._subscribers.get(event.category, ())):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Event callback %r failed for %s event", callback, event.category
                )
