"""
Event bus for booking events.

Synchronous in-process pub/sub on the screen's event loop. Handlers run
immediately in subscription order. Handler errors are logged but never
propagate; the operation that published has already taken effect.
"""

import logging
from typing import Callable, Dict, List

from core.events import BookingEvent

logger = logging.getLogger(__name__)


class EventBus:
    """
    In-process event bus for booking events.

    Subscribe by event class name (string), publish by event instance.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, callback: Callable):
        """
        Subscribe to events of a specific type.

        Args:
            event_type: Name of event class to subscribe to (e.g. 'ReceiptCreated')
            callback: Function to call when event is published
        """
        self._subscribers.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: str, callback: Callable):
        """Remove a callback; unknown callbacks are ignored."""
        callbacks = self._subscribers.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def publish(self, event: BookingEvent):
        """
        Publish an event to all subscribers of that type.

        Args:
            event: BookingEvent instance to publish
        """
        event_type = event.__class__.__name__

        for callback in list(self._subscribers.get(event_type, [])):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Handler %s failed for %s (event_id=%s)",
                    getattr(callback, "__name__", callback),
                    event_type,
                    event.event_id,
                )
