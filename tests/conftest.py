"""
Shared pytest fixtures for taginput tests.
"""
import os
import sys

# Ensure project root is on path for all tests
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Widget tests run without a display.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from taginput.config.options import TagInputOptions
from taginput.core.controller import TagInputController
from taginput.core.event_system import TagEventType
from taginput.core.scheduler import Scheduler, TimerHandle
from taginput.core.views import DropdownView, InputView


class _ManualHandle(TimerHandle):

    def __init__(self, due: int, seq: int, callback):
        self.due = due
        self.seq = seq
        self.callback = callback
        self._active = True

    def cancel(self) -> None:
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def fire(self) -> None:
        self._active = False
        self.callback()


class ManualScheduler(Scheduler):
    """Scheduler driven by the test: time only moves on advance()."""

    def __init__(self):
        self.now = 0
        self._seq = 0
        self._handles: list[_ManualHandle] = []

    def call_later(self, delay_ms, callback):
        self._seq += 1
        handle = _ManualHandle(self.now + max(0, delay_ms), self._seq, callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> list:
        return [h for h in self._handles if h.active]

    def advance(self, ms: int = 0) -> None:
        target = self.now + ms
        while True:
            due = [h for h in self._handles if h.active and h.due <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.due, h.seq))
            self.now = handle.due
            handle.fire()
        self.now = target
        self._handles = [h for h in self._handles if h.active]


class RecordingInputView(InputView):

    def __init__(self):
        self.focus_requests = 0
        self.focused = False
        self.text = ""
        self.blinked = []

    def focus_input(self):
        self.focus_requests += 1
        self.focused = True

    def is_input_focused(self):
        return self.focused

    def set_text(self, text):
        self.text = text

    def blink(self, tag):
        self.blinked.append(tag.value)


class RecordingDropdownView(DropdownView):

    def __init__(self):
        self.shown = []
        self.hide_calls = 0
        self.position_updates = 0
        self.highlighted = None
        self._visible = False

    def show(self, items):
        self.shown.append(list(items))
        self._visible = True

    def hide(self):
        self.hide_calls += 1
        self._visible = False

    def update_position(self):
        self.position_updates += 1

    @property
    def is_visible(self):
        return self._visible

    def set_highlighted(self, item):
        self.highlighted = item


class EventRecorder:
    """Subscribes to every event type and keeps (type, payload) pairs."""

    def __init__(self, controller, types=None):
        self.events = []
        for event_type in types or list(TagEventType):
            controller.subscribe(event_type, self._record)

    def _record(self, event_data):
        payload = getattr(event_data, "tag", None)
        if payload is None:
            payload = event_data.text
        else:
            payload = payload.value
        self.events.append((event_data.event_type, payload))

    def of(self, event_type):
        return [payload for kind, payload in self.events if kind is event_type]

    def kinds(self):
        return [kind for kind, _ in self.events]


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def input_view():
    return RecordingInputView()


@pytest.fixture()
def dropdown_view():
    return RecordingDropdownView()


@pytest.fixture()
def make_controller(scheduler, input_view, dropdown_view):
    """Factory: make_controller(items=None, **option_overrides)."""

    def _make(items=None, **overrides):
        options = TagInputOptions(**overrides)
        return TagInputController(options, input_view=input_view,
                                  dropdown_view=dropdown_view,
                                  scheduler=scheduler, items=items)

    return _make


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication([])
    yield app
