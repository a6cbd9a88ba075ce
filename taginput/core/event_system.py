from PySide6.QtCore import QObject
from typing import Dict, List, Callable, Optional
from dataclasses import dataclass
from collections import deque
from enum import Enum
import logging

from taginput.core.tag_model import TagModel


class TagEventType(Enum):
    ADD = "add"
    REMOVE = "remove"
    SELECT = "select"
    FOCUS = "focus"
    BLUR = "blur"
    TEXT_CHANGE = "text_change"
    PASTE = "paste"
    VALIDATION_ERROR = "validation_error"


@dataclass
class TagEventData:
    event_type: TagEventType
    source: str  # Source widget/component name
    timestamp: float


@dataclass
class TagChangeEventData(TagEventData):
    tag: TagModel


@dataclass
class TextEventData(TagEventData):
    text: str  # buffer text, pasted text or the rejected value


class TagEventNotifier(QObject):
    """Typed publish points of one tag input.

    Each instance belongs to a single controller; subscribers are invoked in
    registration order on the thread that published.
    """

    def __init__(self, history_size: int = 200):
        super().__init__()
        self._subscribers: Dict[TagEventType, List[Callable]] = {}
        self._event_history: deque[TagEventData] = deque(maxlen=history_size)

    def subscribe(self, event_type: TagEventType, callback: Callable[[TagEventData], None]):
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(callback)
        logging.debug(f"Subscribed to {event_type.value}: {getattr(callback, '__name__', callback)!r}")

    def unsubscribe(self, event_type: TagEventType, callback: Callable[[TagEventData], None]):
        if event_type in self._subscribers:
            try:
                self._subscribers[event_type].remove(callback)
                logging.debug(f"Unsubscribed from {event_type.value}")
            except ValueError:
                logging.warning(f"Callback not found for {event_type.value}")

    def has_subscribers(self, event_type: TagEventType) -> bool:
        return bool(self._subscribers.get(event_type))

    def publish(self, event_data: TagEventData):
        self._event_history.append(event_data)
        # Snapshot the subscriber list so callbacks can safely call subscribe/unsubscribe.
        callbacks = list(self._subscribers.get(event_data.event_type, []))

        for callback in callbacks:
            try:
                callback(event_data)
            except Exception as e:
                logging.error(f"Error in tag event callback for {event_data.event_type.value}: {e}", exc_info=True)

        logging.debug("Published tag event: %s from %s", event_data.event_type.value, event_data.source)

    def get_event_history(self, event_type: Optional[TagEventType] = None) -> List[TagEventData]:
        if event_type:
            return [e for e in self._event_history if e.event_type == event_type]
        return list(self._event_history)

    def clear_history(self):
        self._event_history.clear()
