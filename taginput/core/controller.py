"""The tag input controller.

Raw input (keys, edits, paste, dropdown clicks, focus changes) enters here,
goes through the validation pipeline into the collection store, and every
mutation fans out through the event notifier. Rendering is delegated to the
InputView / DropdownView collaborators.
"""

import logging
import time
from typing import Any, Callable, Iterable, List, Optional, Set, Tuple

from taginput.config.keys import KEY_BACKSPACE, KEY_LEFT
from taginput.config.options import TagInputOptions
from taginput.core.autocomplete import AutocompleteCoordinator
from taginput.core.event_system import (
    TagChangeEventData, TagEventNotifier, TagEventType, TextEventData,
)
from taginput.core.keyboard import KeyboardDispatcher, KeyEvent, ListenerKind, ListenerRegistry
from taginput.core.paste import PasteHandler
from taginput.core.scheduler import Debouncer, QtScheduler, Scheduler, TimerHandle
from taginput.core.tag_model import TagModel
from taginput.core.tag_store import InputBuffer, TagCollectionStore
from taginput.core.validation import ValidationPipeline
from taginput.core.views import DropdownView, InputView

_SOURCE = "tag_input"


class TagInputController:

    def __init__(self, options: Optional[TagInputOptions] = None,
                 input_view: Optional[InputView] = None,
                 dropdown_view: Optional[DropdownView] = None,
                 scheduler: Optional[Scheduler] = None,
                 items: Optional[Iterable[Any]] = None):
        self.options = options or TagInputOptions()
        self.input_view = input_view
        self.scheduler = scheduler or QtScheduler()
        self.notifier = TagEventNotifier()
        self.store = TagCollectionStore(capacity=self.options.max_items,
                                        readonly=self.options.readonly)

        self.coordinator: Optional[AutocompleteCoordinator] = None
        if self.options.has_autocomplete:
            self.coordinator = AutocompleteCoordinator(
                self.store,
                list(self.options.autocomplete_items),
                commit=self._commit_from_dropdown,
                view=dropdown_view,
                matcher=self.options.matcher,
                show_if_empty=self.options.show_dropdown_if_empty,
            )

        self.pipeline = ValidationPipeline(self.store, self.options, input_view,
                                           highlighted_item=self._highlighted_item)
        self.store.buffer = InputBuffer(self.pipeline.buffer_valid)

        self.dispatcher = KeyboardDispatcher(self)
        self.paste_handler = PasteHandler(self, self.options.paste_split_pattern)
        self._text_debouncer = Debouncer(self.options.text_change_debounce,
                                         self._emit_text_change, self.scheduler)
        self._deferred: Set[TimerHandle] = set()
        self._touched_callbacks: List[Callable[[], None]] = []
        self._destroyed = False

        self.listeners = ListenerRegistry()
        self._register_listeners()

        if items is not None:
            self.store.seed(items)

    def _register_listeners(self) -> None:
        # Order is significant: listeners on the same kind fire in this order.
        self.listeners.add(ListenerKind.KEYDOWN, self._backspace_listener)
        self.listeners.add(ListenerKind.KEYDOWN, self._separator_listener,
                           condition=len(self.options.separator_keys) > 0)
        if self.coordinator is not None:
            self.listeners.add(ListenerKind.KEYDOWN, self.coordinator.on_keydown)
            self.listeners.add(ListenerKind.KEYUP,
                               lambda event: self.coordinator.on_keyup(event, self.text))
        self.listeners.add(ListenerKind.CHANGE, self._text_change_listener)
        self.listeners.freeze()

    # ── Queries ─────────────────────────────────────────────────────────

    @property
    def items(self) -> List[TagModel]:
        return self.store.items

    @property
    def selected(self) -> Optional[TagModel]:
        return self.store.selected

    @property
    def text(self) -> str:
        return self.store.buffer.text

    @property
    def max_items_reached(self) -> bool:
        return self.store.max_items_reached

    @property
    def readonly(self) -> bool:
        return self.options.readonly

    @property
    def placeholder(self) -> str:
        if not len(self.store):
            return self.options.secondary_placeholder
        return self.options.placeholder

    @property
    def errors(self) -> List[str]:
        text = self.text
        return self.pipeline.errors(text) if text else []

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def find(self, value: str) -> Optional[TagModel]:
        return self.store.find(value)

    def subscribe(self, event_type: TagEventType, callback) -> None:
        self.notifier.subscribe(event_type, callback)

    def unsubscribe(self, event_type: TagEventType, callback) -> None:
        self.notifier.unsubscribe(event_type, callback)

    # ── Collection operations ───────────────────────────────────────────

    def append(self, raw_text: str, from_autocomplete: bool = False) -> Optional[TagModel]:
        """Validates and appends one tag, then clears the buffer and refocuses."""
        return self._append(raw_text, from_autocomplete, refocus=True)

    def add_from_buffer(self, from_autocomplete: bool = False, refocus: bool = True) -> Optional[TagModel]:
        """Commits the text currently typed; a buffer failing its validators is left alone."""
        if self.readonly or self.store.buffer.blank:
            return None
        if not self.store.buffer.valid:
            logging.debug(f"Buffer {self.text!r} fails validators, not committing")
            return None
        return self._append(self.text, from_autocomplete, refocus=refocus)

    def commit_value(self, raw_text: str, from_autocomplete: bool = False) -> Optional[TagModel]:
        """Transform + validate + append without touching the buffer."""
        tag, _ = self._try_commit(raw_text, from_autocomplete)
        return tag

    def emit_paste(self, raw_text: str) -> None:
        self._emit_text(TagEventType.PASTE, raw_text)

    def remove(self, item) -> Optional[TagModel]:
        removed = self.store.remove(item)
        if removed is None:
            return None
        self.focus(apply_focus=True)
        self._emit_tag(TagEventType.REMOVE, removed)
        return removed

    def select(self, item) -> bool:
        if not self.store.select(item):
            return False
        self._emit_tag(TagEventType.SELECT, self.store.selected)
        return True

    def set_autocomplete_items(self, items: List[str]) -> None:
        if self.coordinator is not None:
            self.coordinator.set_candidates(items)

    # ── Buffer and focus ────────────────────────────────────────────────

    def set_text(self, text: str) -> None:
        """Buffer edit coming from the view."""
        self._set_buffer(text, echo=False)

    def clear_buffer(self) -> None:
        self._set_buffer("", echo=True)

    def clear_and_refocus(self) -> None:
        self.clear_buffer()
        self.focus(apply_focus=True)

    def focus(self, apply_focus: bool = False) -> None:
        if self.readonly:
            return
        if self.coordinator is not None:
            self.coordinator.refresh(self.text)
        self.store.clear_selection()
        self._emit_text(TagEventType.FOCUS, self.text)
        if apply_focus and self.input_view is not None:
            self.input_view.focus_input()

    def blur(self) -> None:
        self._emit_text(TagEventType.BLUR, self.text)
        for callback in list(self._touched_callbacks):
            callback()
        if self.options.add_on_blur:
            self.add_from_buffer(refocus=False)
        if self.options.add_on_blur or self.options.clear_on_blur:
            self.clear_buffer()

    def is_input_focused(self) -> bool:
        return bool(self.input_view and self.input_view.is_input_focused())

    # ── Raw input events ────────────────────────────────────────────────

    def keydown(self, event: KeyEvent) -> None:
        if self.readonly or self._destroyed:
            return
        selected = self.store.selected
        if selected is not None:
            # a selected tag has the keyboard
            self.dispatcher.handle(event, selected)
            return
        self.listeners.fire(ListenerKind.KEYDOWN, event)

    def keyup(self, event: KeyEvent) -> None:
        if self.readonly or self._destroyed:
            return
        self.listeners.fire(ListenerKind.KEYUP, event)

    def paste(self, text: str) -> bool:
        """Returns True when the paste was consumed and the host must not insert it."""
        if not self.options.add_on_paste or self.readonly or self._destroyed:
            return False
        self.paste_handler.on_paste(text)
        return True

    def dropdown_item_clicked(self, item: Optional[str]) -> None:
        if self.coordinator is not None:
            self.coordinator.item_clicked(item)

    def dropdown_hidden(self) -> None:
        if self.coordinator is not None:
            self.coordinator.hide(notify_view=False)

    def scroll(self) -> None:
        if self.coordinator is not None:
            self.coordinator.on_scroll()

    # ── Form binding ────────────────────────────────────────────────────

    @property
    def value(self) -> List[TagModel]:
        return self.store.items

    def write_value(self, items: Optional[Iterable[Any]]) -> None:
        self.store.seed(items or [])

    def register_on_change(self, callback: Callable[[List[TagModel]], None]) -> None:
        self.store.register_on_change(callback)

    def register_on_touched(self, callback: Callable[[], None]) -> None:
        self._touched_callbacks.append(callback)

    # ── Scheduling ──────────────────────────────────────────────────────

    def defer(self, callback: Callable[[], None]) -> None:
        """Runs `callback` on the next scheduler tick unless destroyed first."""
        holder: List[TimerHandle] = []

        def run():
            if holder:
                self._deferred.discard(holder[0])
            if not self._destroyed:
                callback()

        handle = self.scheduler.call_later(0, run)
        holder.append(handle)
        self._deferred.add(handle)

    def destroy(self) -> None:
        self._destroyed = True
        self._text_debouncer.cancel()
        for handle in list(self._deferred):
            handle.cancel()
        self._deferred.clear()
        if self.coordinator is not None:
            self.coordinator.hide()
        logging.debug("Tag input destroyed")

    # ── Internals ───────────────────────────────────────────────────────

    def _append(self, raw_text: str, from_autocomplete: bool, refocus: bool) -> Optional[TagModel]:
        if self.readonly:
            return None
        tag, verdict = self._try_commit(raw_text, from_autocomplete)
        if verdict is None:
            return None
        self.clear_buffer()
        if refocus:
            self.focus(apply_focus=True)
        return tag

    def _try_commit(self, raw_text: str, from_autocomplete: bool) -> Tuple[Optional[TagModel], Optional[bool]]:
        value = self._transform(raw_text)
        verdict = self.pipeline.is_valid(value, from_autocomplete)
        if verdict is None:
            return None, None
        if not verdict:
            logging.debug(f"Rejected tag {value!r}")
            self._emit_text(TagEventType.VALIDATION_ERROR, value)
            return None, False
        tag = TagModel(value)
        self.store.add(tag)
        self._emit_tag(TagEventType.ADD, tag)
        return tag, True

    def _transform(self, raw_text: Optional[str]) -> str:
        if not raw_text:
            return ""
        try:
            value = self.options.transform(raw_text)
        except Exception as e:
            logging.error(f"Tag transform raised for {raw_text!r}: {e}", exc_info=True)
            return ""
        return "" if value is None else str(value)

    def _commit_from_dropdown(self, value: str, from_autocomplete: bool) -> None:
        self._append(value, from_autocomplete, refocus=True)

    def _highlighted_item(self) -> Optional[str]:
        return self.coordinator.highlighted if self.coordinator is not None else None

    def _set_buffer(self, text: str, echo: bool) -> None:
        text = text or ""
        if text == self.store.buffer.text:
            return
        self.store.buffer.text = text
        if text:
            self.store.clear_selection()
        if echo and self.input_view is not None:
            self.input_view.set_text(text)
        self.listeners.fire(ListenerKind.CHANGE, text)

    def _backspace_listener(self, event: KeyEvent) -> None:
        if event.key in (KEY_BACKSPACE, KEY_LEFT) and not self.text and len(self.store):
            self.select(self.store.last)

    def _separator_listener(self, event: KeyEvent) -> None:
        if event.key in self.options.separator_keys and not self.store.buffer.blank:
            event.prevent_default()
            self.add_from_buffer()

    def _text_change_listener(self, text: str) -> None:
        if self._destroyed:
            return
        if self.notifier.has_subscribers(TagEventType.TEXT_CHANGE):
            self._text_debouncer.trigger(text)

    def _emit_text_change(self, text: str) -> None:
        self._emit_text(TagEventType.TEXT_CHANGE, text)

    def _emit_tag(self, event_type: TagEventType, tag: TagModel) -> None:
        if self._destroyed:
            return
        self.notifier.publish(TagChangeEventData(event_type=event_type, source=_SOURCE,
                                                 timestamp=time.time(), tag=tag))

    def _emit_text(self, event_type: TagEventType, text: str) -> None:
        if self._destroyed:
            return
        self.notifier.publish(TextEventData(event_type=event_type, source=_SOURCE,
                                            timestamp=time.time(), text=text))
