# EventBus - Toolkit-independent publish/subscribe event system
#
# Lets the sync core notify collaborators (persistence, status bar,
# the Qt signal hub) without importing any of them.  The Qt layer
# forwards the events it cares about to AppSignals.

import logging
import threading
from collections import defaultdict

# Event names emitted by the sync core
MODEL_CHANGED = "model_changed"         # (project)
TEXT_GENERATED = "text_generated"       # (text)
SCREENS_CHANGED = "screens_changed"     # ()
STATUS_MESSAGE = "status_message"       # (message)


class EventBus:
    """Simple publish/subscribe event bus.

    Subscribers are called synchronously on the emitting thread, in
    subscription order.  A subscriber that raises is logged and does
    not prevent delivery to the rest.
    """

    def __init__(self):
        self._subscribers = defaultdict(list)
        self._lock = threading.Lock()

    def on(self, event_name, callback):
        """Subscribe to an event.

        Args:
            event_name: String identifier for the event.
            callback: Callable to invoke when event fires.
                      Receives (*args, **kwargs) passed to emit().
        """
        with self._lock:
            if callback not in self._subscribers[event_name]:
                self._subscribers[event_name].append(callback)

    def off(self, event_name, callback):
        with self._lock:
            callbacks = self._subscribers.get(event_name, [])
            if callback in callbacks:
                callbacks.remove(callback)

    def emit(self, event_name, *args, **kwargs):
        """Emit an event, calling all subscribers.

        Returns:
            Number of subscribers that ran without raising.
        """
        with self._lock:
            callbacks = list(self._subscribers.get(event_name, ()))
        delivered = 0
        for callback in callbacks:
            try:
                callback(*args, **kwargs)
            except Exception:
                logging.exception("Subscriber of %r failed", event_name)
            else:
                delivered += 1
        return delivered

    def subscribers(self, event_name):
        with self._lock:
            return list(self._subscribers.get(event_name, ()))

    def clear(self, event_name=None):
        """Remove all subscribers, optionally for a specific event."""
        with self._lock:
            if event_name is None:
                self._subscribers.clear()
            else:
                self._subscribers.pop(event_name, None)


# Singleton instance shared across the application
bus = EventBus()
