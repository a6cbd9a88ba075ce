import logging
from typing import Callable, Iterable, List, Optional

from taginput.config.options import MAX_ITEMS_WARNING
from taginput.core.tag_model import TagModel


class InputBuffer:
    """The text being typed and whether it passes the buffer validators."""

    def __init__(self, validity: Optional[Callable[[str], bool]] = None):
        self.text: str = ""
        self._validity = validity

    @property
    def valid(self) -> bool:
        return self._validity(self.text) if self._validity else True

    @property
    def blank(self) -> bool:
        return not self.text.strip()

    def clear(self) -> None:
        self.text = ""


class TagCollectionStore:
    """Ordered, unique-by-value tag collection and the single source of truth.

    The selection is kept as the selected tag's value and resolved on every
    read, so it can never refer to a tag that has been removed.
    """

    def __init__(self, capacity: Optional[int] = None, readonly: bool = False,
                 buffer: Optional[InputBuffer] = None):
        self._items: List[TagModel] = []
        self._selected_value: Optional[str] = None
        self.capacity = capacity
        self._max_items = capacity  # configured limit, capacity may be raised above it
        self._capacity_warned = False
        self.readonly = readonly
        self.buffer = buffer or InputBuffer()
        self._change_callbacks: List[Callable[[List[TagModel]], None]] = []

    # ── Queries ─────────────────────────────────────────────────────────

    @property
    def items(self) -> List[TagModel]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    def __contains__(self, item) -> bool:
        return self.find(_value_of(item)) is not None

    @property
    def last(self) -> Optional[TagModel]:
        return self._items[-1] if self._items else None

    @property
    def selected(self) -> Optional[TagModel]:
        if self._selected_value is None:
            return None
        tag = self.find(self._selected_value)
        if tag is None:
            self._selected_value = None
        return tag

    @property
    def max_items_reached(self) -> bool:
        return self.capacity is not None and len(self._items) >= self.capacity

    def find(self, value: Optional[str]) -> Optional[TagModel]:
        if value is None:
            return None
        for item in self._items:
            if item.value == value:
                return item
        return None

    def index_of(self, item) -> int:
        value = _value_of(item)
        for i, tag in enumerate(self._items):
            if tag.value == value:
                return i
        return -1

    # ── Mutations ───────────────────────────────────────────────────────

    def add(self, tag: TagModel) -> None:
        """Appends an already validated tag."""
        if self.find(tag.value) is not None:
            raise ValueError(f"Duplicate tag value: {tag.value!r}")
        self._items.append(tag)
        logging.debug(f"Tag added: {tag.value!r} ({len(self._items)} items)")
        self._notify_change()

    def remove(self, item) -> Optional[TagModel]:
        if self.readonly or item is None:
            return None
        existing = self.find(_value_of(item))
        if existing is None:
            return None
        self._items = [tag for tag in self._items if tag.value != existing.value]
        if self._selected_value == existing.value:
            self._selected_value = None
        logging.debug(f"Tag removed: {existing.value!r}")
        self._notify_change()
        return existing

    def select(self, item) -> bool:
        """Returns True only when the selection actually changed."""
        if self.readonly or item is None:
            return False
        existing = self.find(_value_of(item))
        if existing is None or existing.value == self._selected_value:
            return False
        self._selected_value = existing.value
        return True

    def clear_selection(self) -> None:
        self._selected_value = None

    def seed(self, items: Iterable) -> None:
        """Replaces the collection from an external model.

        An over-full model raises the capacity to its size instead of being
        truncated. The capacity is recomputed from the configured limit on
        every seed, so a later smaller model brings it back down.
        """
        seeded = _dedupe(items)
        if self._max_items is not None:
            self.capacity = max(self._max_items, len(seeded))
            if len(seeded) > self._max_items and not self._capacity_warned:
                self._capacity_warned = True
                logging.warning(MAX_ITEMS_WARNING)
        self._replace(seeded)

    def replace_all(self, items: Iterable) -> None:
        """Replaces the collection as given, leaving the capacity untouched."""
        self._replace(_dedupe(items))

    def _replace(self, tags: List[TagModel]) -> None:
        self._items = tags
        if self.find(self._selected_value) is None:
            self._selected_value = None
        self._notify_change()

    # ── Change notification ─────────────────────────────────────────────

    def register_on_change(self, callback: Callable[[List[TagModel]], None]) -> None:
        self._change_callbacks.append(callback)

    def _notify_change(self) -> None:
        snapshot = self.items
        for callback in list(self._change_callbacks):
            try:
                callback(snapshot)
            except Exception as e:
                logging.error(f"Error in tag collection change callback: {e}", exc_info=True)


def _dedupe(items: Optional[Iterable]) -> List[TagModel]:
    tags: List[TagModel] = []
    seen = set()
    for raw in items or []:
        tag = TagModel.coerce(raw)
        if tag.value in seen:
            logging.debug(f"Dropping duplicate seeded tag {tag.value!r}")
            continue
        seen.add(tag.value)
        tags.append(tag)
    return tags


def _value_of(item) -> Optional[str]:
    if item is None:
        return None
    if isinstance(item, TagModel):
        return item.value
    return str(item)
