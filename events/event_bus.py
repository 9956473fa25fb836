"""
Event Bus for registry signals

Signals are dispatched synchronously inside the registry call that raised them,
so a caller observes them before the call returns.
"""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List

from config.config import EVENT_HISTORY_SIZE

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """Event data structure"""
    type: str
    data: Dict[str, Any]
    timestamp: float
    source: str = "registry"


class EventBus:
    """
    Fan-out of registry signals to subscribed listeners, with a bounded history
    of everything emitted
    """

    def __init__(self, history_size: int = EVENT_HISTORY_SIZE):
        self.listeners: Dict[str, List[Callable[[Event], Any]]] = defaultdict(list)
        self.history: Deque[Event] = deque(maxlen=history_size)

    def _dispatch_event(self, event: Event):
        """Dispatch event to all registered listeners"""
        listeners = list(self.listeners.get(event.type, []))

        if not listeners:
            logger.debug(f"No listeners for event type: {event.type}")
            return

        logger.debug(f"Dispatching {event.type} to {len(listeners)} listeners")
        for listener in listeners:
            self._call_listener(listener, event)

    def _call_listener(self, listener: Callable, event: Event):
        """Call a listener; a failing listener never breaks the emitting call"""
        try:
            listener(event)
        except Exception as e:
            logger.error(f"Error in listener {getattr(listener, '__name__', listener)}: {e}")

    def subscribe(self, event_type: str, listener: Callable[[Event], Any]):
        """Subscribe to an event type"""
        self.listeners[event_type].append(listener)
        logger.info(f"Subscribed {getattr(listener, '__name__', listener)} to {event_type}")

    def unsubscribe(self, event_type: str, listener: Callable[[Event], Any]):
        """Unsubscribe from an event type"""
        if listener in self.listeners[event_type]:
            self.listeners[event_type].remove(listener)
            logger.info(f"Unsubscribed {getattr(listener, '__name__', listener)} from {event_type}")

    def emit(self, event_type: str, data: Dict[str, Any], source: str = "registry") -> Event:
        """Emit an event"""
        event = Event(
            type=event_type,
            data=data,
            timestamp=datetime.now().timestamp(),
            source=source
        )
        self.history.append(event)
        logger.debug(f"Emitted event: {event_type} from {source}")
        self._dispatch_event(event)
        return event

    def events_of(self, event_type: str) -> List[Event]:
        """Events of one type still held in history, oldest first"""
        return [event for event in self.history if event.type == event_type]

    def clear_history(self):
        self.history.clear()


class EventTypes:
    """Standard event types"""
    # Membership events
    TOKEN_REGISTERED = "token_registered"
    TOKEN_REMOVED = "token_removed"

    # First sighting of a user or token by the index
    USER_ADDED = "user_added"
    TOKEN_ADDED = "token_added"

    # Balance source events (mutation paths only)
    BALANCE_UPDATE_FAILED = "balance_update_failed"
