"""Event publisher for drive scanner results."""
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

DRIVES_EVENT = "drives"
ERROR_EVENT = "error"

EVENTS = (DRIVES_EVENT, ERROR_EVENT)

Listener = Callable[[Any], None]


class DriveScannerEvents:
    """Fans scan results out to subscribers in subscription order."""

    def __init__(self):
        """Initialize the event publisher."""
        self._listeners: Dict[str, List[Listener]] = {event: [] for event in EVENTS}

    def _get_listeners(self, event: str) -> List[Listener]:
        if event not in self._listeners:
            raise ValueError(f"Unknown event '{event}', expected one of {', '.join(EVENTS)}")
        return self._listeners[event]

    def on(self, event: str, callback: Listener) -> None:
        """
        Register a callback for an event.

        Args:
            event: Either "drives" or "error"
            callback: Function called with the event payload
        """
        self._get_listeners(event).append(callback)
        logger.debug(f"Registered {event} listener")

    def off(self, event: str, callback: Listener) -> bool:
        """
        Unregister a callback.

        Returns:
            True if callback was removed, False otherwise
        """
        listeners = self._get_listeners(event)
        if callback in listeners:
            listeners.remove(callback)
            return True
        return False

    def listener_count(self, event: str) -> int:
        return len(self._get_listeners(event))

    def emit(self, event: str, payload: Any) -> None:
        """
        Deliver a payload to every listener of an event.

        A listener raising does not prevent delivery to the others.
        """
        # Copy so listeners may unsubscribe while being notified
        for callback in list(self._get_listeners(event)):
            try:
                callback(payload)
            except Exception as e:
                logger.error(f"Error in {event} listener: {e}", exc_info=True)
