"""Keeps the dropdown's match set in step with the text buffer."""

import logging
from enum import Enum
from typing import Callable, List, Optional

from taginput.config.keys import (
    KEY_DOWN, KEY_ENTER, KEY_ESCAPE, KEY_RETURN, KEY_UP,
)
from taginput.config.options import Matcher, contains_ignore_case
from taginput.core.keyboard import KeyEvent
from taginput.core.tag_store import TagCollectionStore
from taginput.core.views import DropdownView

_NAVIGATION_KEYS = frozenset({KEY_UP, KEY_DOWN, KEY_RETURN, KEY_ENTER, KEY_ESCAPE})


class DropdownState(Enum):
    HIDDEN = "hidden"
    VISIBLE_EMPTY = "visible_empty"
    VISIBLE_MATCHING = "visible_matching"
    ITEM_HIGHLIGHTED = "item_highlighted"


class AutocompleteCoordinator:
    """Owns only the transient match set and keyboard highlight.

    Candidates are read from an external list; commits go back through the
    controller with `from_autocomplete=True`.
    """

    def __init__(self, store: TagCollectionStore, candidates: List[str],
                 commit: Callable[[str, bool], None],
                 view: Optional[DropdownView] = None,
                 matcher: Matcher = contains_ignore_case,
                 show_if_empty: bool = False):
        self._store = store
        self._candidates = candidates
        self._commit = commit
        self._view = view
        self._matcher = matcher
        self._show_if_empty = show_if_empty
        self.matches: List[str] = []
        self._highlight_index: Optional[int] = None
        self._visible = False

    # ── State ───────────────────────────────────────────────────────────

    @property
    def state(self) -> DropdownState:
        if not self._visible:
            return DropdownState.HIDDEN
        if self._highlight_index is not None:
            return DropdownState.ITEM_HIGHLIGHTED
        if self.matches:
            return DropdownState.VISIBLE_MATCHING
        return DropdownState.VISIBLE_EMPTY

    @property
    def is_visible(self) -> bool:
        return self._visible

    @property
    def highlighted(self) -> Optional[str]:
        if self._highlight_index is None:
            return None
        return self.matches[self._highlight_index]

    def set_candidates(self, candidates: List[str]) -> None:
        self._candidates = list(candidates)

    # ── Triggers ────────────────────────────────────────────────────────

    def refresh(self, text: str) -> None:
        """Recomputes the match set for the current buffer text."""
        if not text and not self._show_if_empty:
            self.hide()
            return

        self.matches = [c for c in self._candidates
                        if self._store.find(c) is None and self._matcher(c, text)]
        self._highlight_index = None

        if text and not self.matches:
            self.hide()
            return

        self._visible = True
        if self._view is not None:
            self._view.show(list(self.matches))
            self._view.set_highlighted(None)
        logging.debug(f"Autocomplete {self.state.value}: {len(self.matches)} matches for {text!r}")

    def highlight_next(self) -> None:
        if not self.matches:
            return
        if self._highlight_index is None or self._highlight_index >= len(self.matches) - 1:
            self._highlight_index = 0
        else:
            self._highlight_index += 1
        self._sync_highlight()

    def highlight_previous(self) -> None:
        if not self.matches:
            return
        if self._highlight_index is None or self._highlight_index <= 0:
            self._highlight_index = len(self.matches) - 1
        else:
            self._highlight_index -= 1
        self._sync_highlight()

    def item_clicked(self, item: Optional[str]) -> None:
        if not item:
            return
        self._commit(item, True)
        self.hide()

    def commit_highlighted(self) -> bool:
        item = self.highlighted
        if item is None:
            return False
        self.item_clicked(item)
        return True

    def hide(self, notify_view: bool = True) -> None:
        was_visible = self._visible
        self.matches = []
        self._highlight_index = None
        self._visible = False
        if notify_view and was_visible and self._view is not None:
            self._view.hide()

    def on_scroll(self) -> None:
        if self._visible and self._view is not None:
            self._view.update_position()

    # ── Listeners ───────────────────────────────────────────────────────

    def on_keydown(self, event: KeyEvent) -> None:
        if not self._visible:
            return
        if event.key == KEY_DOWN:
            self.highlight_next()
        elif event.key == KEY_UP:
            self.highlight_previous()
        elif event.key == KEY_ESCAPE:
            self.hide()
        elif event.key in (KEY_RETURN, KEY_ENTER):
            if not self.commit_highlighted():
                return
        else:
            return
        event.prevent_default()

    def on_keyup(self, event: KeyEvent, text: str) -> None:
        if event.key in _NAVIGATION_KEYS:
            return
        self.refresh(text)

    def _sync_highlight(self) -> None:
        if self._view is not None:
            self._view.set_highlighted(self.highlighted)
