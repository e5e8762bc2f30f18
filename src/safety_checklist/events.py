"""Notification event bus.

Handlers subscribe to an explicit EventBus instance that is passed to the
services that publish; there is no module-level listener list.
"""
import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from shared.enums import NotificationLevel


@dataclass(frozen=True)
class Notification:
    """A transient user-facing message (toast)."""
    message: str
    level: NotificationLevel = NotificationLevel.INFO
    title: Optional[str] = None
    duration: float = 5.0
    id: int = field(default=0, compare=False)


class EventBus:
    """Synchronous publish/subscribe bus for notifications."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self._handlers: List[Callable[[Notification], None]] = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def subscribe(self, handler):
        """Register a handler and return a callable that unregisters it."""
        with self._lock:
            self._handlers.append(handler)

        def unsubscribe():
            with self._lock:
                if handler in self._handlers:
                    self._handlers.remove(handler)

        return unsubscribe

    def publish(self, event):
        """Deliver an event to every current subscriber.

        A failing subscriber is logged and does not prevent delivery to the others.
        """
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                self.logger.error(f"Notification handler {handler!r} failed: {e}", exc_info=True)
        return event

    def notify(self, message, level=NotificationLevel.INFO, title=None, duration=5.0):
        """Build and publish a Notification."""
        self.logger.debug(f"Notify [{NotificationLevel(level).value}]: {message}")
        return self.publish(Notification(
            message=message,
            level=NotificationLevel(level),
            title=title,
            duration=duration,
            id=next(self._ids),
        ))
