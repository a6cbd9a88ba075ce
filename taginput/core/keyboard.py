"""Key handling: the tag-level action table and the input-level listener registry."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from taginput.config.keys import (
    KEY_BACKSPACE, KEY_DELETE, KEY_LEFT, KEY_RIGHT, KEY_TAB,
)
from taginput.core.tag_model import TagModel


@dataclass
class KeyEvent:
    key: int
    text: str = ""
    modifiers: int = 0
    default_prevented: bool = field(default=False, compare=False)

    def prevent_default(self) -> None:
        self.default_prevented = True


class TagAction(Enum):
    REMOVE = "remove"
    SELECT_PREVIOUS = "select_previous"
    SELECT_NEXT = "select_next"


# Keys handled while a tag (not the text field) has the keyboard.
KEY_ACTIONS: Dict[int, TagAction] = {
    KEY_BACKSPACE: TagAction.REMOVE,
    KEY_DELETE: TagAction.REMOVE,
    KEY_LEFT: TagAction.SELECT_PREVIOUS,
    KEY_RIGHT: TagAction.SELECT_NEXT,
    KEY_TAB: TagAction.SELECT_NEXT,
}


class KeyboardDispatcher:
    """Maps a key code to a TagAction and runs it against the controller."""

    def __init__(self, controller):
        self._controller = controller

    def action_for(self, key: int) -> Optional[TagAction]:
        return KEY_ACTIONS.get(key)

    def handle(self, event: KeyEvent, focused_tag: Optional[TagModel]) -> bool:
        """Returns True when the key was consumed."""
        action = self.action_for(event.key)
        if action is None:
            return False

        logging.debug(f"Key {event.key:#x} -> {action.value} on {focused_tag!r}")
        if action is TagAction.REMOVE:
            self._remove(focused_tag)
        elif action is TagAction.SELECT_PREVIOUS:
            self._select_previous(focused_tag)
        elif action is TagAction.SELECT_NEXT:
            self._select_next(focused_tag)

        event.prevent_default()
        return True

    def _remove(self, tag: Optional[TagModel]) -> None:
        if tag is not None:
            self._controller.remove(tag)

    def _select_previous(self, tag: Optional[TagModel]) -> None:
        store = self._controller.store
        index = store.index_of(tag)
        if index <= 0:
            return
        self._controller.select(store.items[index - 1])

    def _select_next(self, tag: Optional[TagModel]) -> None:
        store = self._controller.store
        index = store.index_of(tag)
        if index < 0 or index >= len(store) - 1:
            # past the last tag the keyboard returns to the text field
            self._controller.focus(apply_focus=True)
            return
        self._controller.select(store.items[index + 1])


class ListenerKind(Enum):
    KEYDOWN = "keydown"
    KEYUP = "keyup"
    CHANGE = "change"


# KEYDOWN/KEYUP listeners receive a KeyEvent, CHANGE listeners the new text.
Listener = Callable[[Any], None]


class ListenerRegistry:
    """Ordered input-level listeners per event kind.

    Filled once while the controller is built, then frozen so the firing order
    stays the registration order for the lifetime of the widget.
    """

    def __init__(self):
        self._listeners: Dict[ListenerKind, List[Listener]] = {kind: [] for kind in ListenerKind}
        self._frozen = False

    def add(self, kind: ListenerKind, listener: Listener, condition: bool = True) -> None:
        if self._frozen:
            raise RuntimeError("Listener registry is frozen after initialization")
        if not condition:
            return
        self._listeners[kind].append(listener)

    def freeze(self) -> None:
        self._frozen = True

    def listeners(self, kind: ListenerKind) -> List[Listener]:
        return list(self._listeners[kind])

    def fire(self, kind: ListenerKind, event: Any) -> None:
        for listener in self._listeners[kind]:
            listener(event)
