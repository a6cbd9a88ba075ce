"""PySide6 shim around TagInputController.

The QLineEdit is only the text field: keys, edits, paste and focus changes are
forwarded to the controller, which decides everything else. The completer
popup is detached (not set via setCompleter()) so the controller owns the
match set.
"""

import logging
from typing import List, Optional

from PySide6.QtCore import QEvent, QObject, QStringListModel, QTimer, Qt, Signal
from PySide6.QtGui import QClipboard, QGuiApplication, QKeySequence
from PySide6.QtWidgets import QCompleter, QLineEdit

from taginput.config.options import TagInputOptions
from taginput.core.controller import TagInputController
from taginput.core.keyboard import KeyEvent
from taginput.core.scheduler import Scheduler
from taginput.core.tag_model import TagModel
from taginput.core.views import DropdownView, InputView

_BLINK_MS = 300
_BLINK_STYLE = "QLineEdit { border: 1px solid orange; }"


def _as_int(value) -> int:
    # Qt enum or flag, or already an int
    return int(getattr(value, "value", value))


class _LineEditView(InputView):

    def __init__(self, widget: 'TagLineEdit'):
        self._widget = widget

    def focus_input(self) -> None:
        self._widget.setFocus()

    def is_input_focused(self) -> bool:
        return self._widget.hasFocus()

    def set_text(self, text: str) -> None:
        if self._widget.text() != text:
            self._widget.setText(text)

    def blink(self, tag: TagModel) -> None:
        self._widget.blink(tag)


class _PopupWatcher(QObject):
    """Reports the popup hiding itself (outside click, Escape handled by Qt)."""

    def __init__(self, on_hide, parent=None):
        super().__init__(parent)
        self._on_hide = on_hide

    def eventFilter(self, obj, event):
        if event.type() == QEvent.Type.Hide:
            self._on_hide()
        return False


class CompleterDropdown(DropdownView):
    """DropdownView backed by a detached QCompleter popup."""

    def __init__(self, widget: QLineEdit):
        self._widget = widget
        self._controller: Optional[TagInputController] = None
        self._model = QStringListModel(widget)
        self._completer = QCompleter(self._model, widget)
        self._completer.setCaseSensitivity(Qt.CaseInsensitive)
        self._completer.setCompletionMode(QCompleter.PopupCompletion)
        self._completer.setWidget(widget)
        self._completer.popup().clicked.connect(self._on_popup_clicked)
        self._watcher = _PopupWatcher(self._on_popup_hidden, widget)
        self._completer.popup().installEventFilter(self._watcher)
        self._hiding = False

    def bind(self, controller: TagInputController) -> None:
        self._controller = controller

    def show(self, items: List[str]) -> None:
        self._model.setStringList(items)
        if items:
            self._completer.complete()
        else:
            # QCompleter hides itself with no completions; open the bare popup
            self._show_empty_popup()

    def hide(self) -> None:
        self._hiding = True
        try:
            self._completer.popup().hide()
        finally:
            self._hiding = False

    def update_position(self) -> None:
        if self.is_visible:
            self._completer.complete()

    @property
    def is_visible(self) -> bool:
        return self._completer.popup().isVisible()

    @property
    def items(self) -> List[str]:
        return self._model.stringList()

    def set_highlighted(self, item) -> None:
        popup = self._completer.popup()
        words = self._model.stringList()
        row = words.index(item) if item in words else -1
        popup.setCurrentIndex(self._model.index(row, 0))

    def _show_empty_popup(self) -> None:
        popup = self._completer.popup()
        origin = self._widget.mapToGlobal(self._widget.rect().bottomLeft())
        popup.setGeometry(origin.x(), origin.y(), self._widget.width(),
                          self._widget.fontMetrics().height() + 4)
        popup.show()

    def _on_popup_clicked(self, index) -> None:
        text = index.data()
        if text and self._controller is not None:
            self._controller.dropdown_item_clicked(text)

    def _on_popup_hidden(self) -> None:
        if not self._hiding and self._controller is not None:
            self._controller.dropdown_hidden()


class TagLineEdit(QLineEdit):
    """A QLineEdit that commits its text into tags.

    Signals:
        values_changed(list): tag values after every collection change; the
            form-binding hook for Qt hosts.
        tag_blinked(str): value of an existing tag that a duplicate hit.
    """

    values_changed = Signal(list)
    tag_blinked = Signal(str)

    def __init__(self, options: Optional[TagInputOptions] = None, items=None,
                 scheduler: Optional[Scheduler] = None, parent=None):
        super().__init__(parent)
        options = options or TagInputOptions()
        self._view = _LineEditView(self)
        self._dropdown = CompleterDropdown(self) if options.has_autocomplete else None

        self.controller = TagInputController(options, input_view=self._view,
                                             dropdown_view=self._dropdown,
                                             scheduler=scheduler, items=items)
        if self._dropdown is not None:
            self._dropdown.bind(self.controller)

        self.controller.register_on_change(self._on_collection_changed)
        self.textEdited.connect(self.controller.set_text)
        self.setReadOnly(options.readonly)
        self._refresh_placeholder()

    # ── Public API ──────────────────────────────────────────────────────

    def get_values(self) -> List[str]:
        return [tag.value for tag in self.controller.items]

    def set_values(self, values) -> None:
        self.controller.write_value(values)

    @property
    def dropdown(self) -> Optional[CompleterDropdown]:
        return self._dropdown

    def blink(self, tag: TagModel) -> None:
        logging.debug(f"Blinking duplicate tag {tag.value!r}")
        self.tag_blinked.emit(tag.value)
        previous = self.styleSheet()
        self.setStyleSheet(_BLINK_STYLE)
        QTimer.singleShot(_BLINK_MS, lambda: self.setStyleSheet(previous))

    # ── Internals ───────────────────────────────────────────────────────

    def _on_collection_changed(self, items: List[TagModel]) -> None:
        self._refresh_placeholder()
        self.values_changed.emit([tag.value for tag in items])

    def _refresh_placeholder(self) -> None:
        self.setPlaceholderText(self.controller.placeholder)

    @staticmethod
    def _to_key_event(event) -> KeyEvent:
        return KeyEvent(key=_as_int(event.key()), text=event.text(),
                        modifiers=_as_int(event.modifiers()))

    # ── Qt event overrides ──────────────────────────────────────────────

    def paste_clipboard(self, mode=QClipboard.Mode.Clipboard) -> bool:
        """Offers clipboard text to the controller; True when it consumed the paste."""
        return self.controller.paste(QGuiApplication.clipboard().text(mode))

    def _paste_from_menu(self) -> None:
        if not self.paste_clipboard():
            self.paste()

    def keyPressEvent(self, event):
        if event.matches(QKeySequence.StandardKey.Paste):
            if self.paste_clipboard():
                event.accept()
                return
            super().keyPressEvent(event)
            return

        key_event = self._to_key_event(event)
        self.controller.keydown(key_event)
        if key_event.default_prevented:
            event.accept()
            return
        super().keyPressEvent(event)

    def keyReleaseEvent(self, event):
        super().keyReleaseEvent(event)
        self.controller.keyup(self._to_key_event(event))

    def mouseReleaseEvent(self, event):
        # X11 middle-click pastes the selection clipboard
        if (event.button() == Qt.MouseButton.MiddleButton
                and QGuiApplication.clipboard().supportsSelection()
                and self.paste_clipboard(QClipboard.Mode.Selection)):
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def contextMenuEvent(self, event):
        menu = self.create_context_menu()
        menu.exec(event.globalPos())
        menu.deleteLater()

    def create_context_menu(self):
        """The standard QLineEdit menu with its Paste action routed through paste_clipboard."""
        menu = self.createStandardContextMenu()
        for action in menu.actions():
            if action.objectName() == "edit-paste":
                action.triggered.disconnect()
                action.triggered.connect(self._paste_from_menu)
        return menu

    def focusInEvent(self, event):
        super().focusInEvent(event)
        self.controller.focus()

    def focusOutEvent(self, event):
        super().focusOutEvent(event)
        self.controller.blur()

    def closeEvent(self, event):
        self.controller.destroy()
        super().closeEvent(event)
