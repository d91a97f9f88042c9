"""Registry that fans security system changes out to status listeners."""

import threading
from typing import Callable, List, Optional

from ..models.status import AlarmStatus
from .interfaces import StatusListener
from .error_handler import ErrorHandler, ErrorSeverity, global_error_handler
from ..logging_config import get_logger

logger = get_logger("status_listeners")

COMPONENT_NAME = "status_listener"


class StatusListenerRegistry:
    """Set of status listeners keyed by identity.

    Broadcasts iterate over a snapshot, so a listener may add or remove
    listeners while being notified. A failing listener is logged and reported
    to the error handler; the remaining listeners are still notified.
    """

    def __init__(self, error_handler: Optional[ErrorHandler] = None):
        self._listeners: List[StatusListener] = []
        self._lock = threading.Lock()
        self.error_handler = error_handler or global_error_handler
        self.error_handler.register_component(COMPONENT_NAME)

    def add(self, listener: StatusListener) -> None:
        with self._lock:
            if not any(existing is listener for existing in self._listeners):
                self._listeners.append(listener)

    def remove(self, listener: StatusListener) -> None:
        with self._lock:
            self._listeners = [existing for existing in self._listeners if existing is not listener]

    def snapshot(self) -> List[StatusListener]:
        with self._lock:
            return list(self._listeners)

    def __contains__(self, listener: object) -> bool:
        return any(existing is listener for existing in self.snapshot())

    def __len__(self) -> int:
        return len(self.snapshot())

    def broadcast_alarm_status(self, status: AlarmStatus) -> int:
        """Deliver a new alarm status; returns the number of failed listeners."""
        return self._broadcast("notify", lambda listener: listener.notify(status))

    def broadcast_cat_detected(self, cat_detected: bool) -> int:
        return self._broadcast("cat_detected", lambda listener: listener.cat_detected(cat_detected))

    def broadcast_sensor_status_changed(self) -> int:
        return self._broadcast("sensor_status_changed", lambda listener: listener.sensor_status_changed())

    def _broadcast(self, callback_name: str, deliver: Callable[[StatusListener], None]) -> int:
        failures = 0
        for listener in self.snapshot():
            try:
                deliver(listener)
            except Exception as e:
                failures += 1
                logger.error(f"Status listener failed: {e}", extra={'context': {
                    'listener': type(listener).__name__,
                    'callback': callback_name
                }})
                self.error_handler.handle_error(COMPONENT_NAME, e, ErrorSeverity.LOW)
        return failures
