"""Deferred calls and debouncing.

Everything runs on the GUI thread; "later" means a later turn of the event
loop, never a blocking wait.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Set

from PySide6.QtCore import QTimer


class TimerHandle(ABC):

    @abstractmethod
    def cancel(self) -> None:
        pass

    @property
    @abstractmethod
    def active(self) -> bool:
        pass


class Scheduler(ABC):

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Runs `callback` once after `delay_ms`. A delay of 0 means the next tick."""


class _QtTimerHandle(TimerHandle):

    def __init__(self, timer: QTimer, owner: 'QtScheduler'):
        self._timer = timer
        self._owner = owner

    def cancel(self) -> None:
        self._timer.stop()
        self._owner._release(self._timer)

    @property
    def active(self) -> bool:
        return self._timer.isActive()


class QtScheduler(Scheduler):
    """Single-shot QTimer per call; timers stay referenced until they fire."""

    def __init__(self) -> None:
        self._timers: Set[QTimer] = set()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        timer = QTimer()
        timer.setSingleShot(True)
        timer.setInterval(max(0, int(delay_ms)))
        timer.timeout.connect(lambda t=timer: self._fire(t, callback))
        self._timers.add(timer)
        timer.start()
        return _QtTimerHandle(timer, self)

    def _fire(self, timer: QTimer, callback: Callable[[], None]) -> None:
        self._release(timer)
        callback()

    def _release(self, timer: QTimer) -> None:
        self._timers.discard(timer)

    @property
    def pending_count(self) -> int:
        return len(self._timers)


class Debouncer:
    """Coalesces bursts of triggers into one callback with the latest value.

    Each trigger cancels the pending timer and starts a new one, so the callback
    fires at most once per quiet period.
    """

    def __init__(self, interval_ms: int, callback: Callable[[Any], None], scheduler: Scheduler):
        self.interval_ms = interval_ms
        self._callback = callback
        self._scheduler = scheduler
        self._handle: Optional[TimerHandle] = None
        self._latest: Any = None

    def trigger(self, value: Any) -> None:
        self._latest = value
        if self._handle is not None:
            self._handle.cancel()
        self._handle = self._scheduler.call_later(self.interval_ms, self._expire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            logging.debug("Debouncer cancelled")

    @property
    def pending(self) -> bool:
        return self._handle is not None and self._handle.active

    def _expire(self) -> None:
        self._handle = None
        self._callback(self._latest)
