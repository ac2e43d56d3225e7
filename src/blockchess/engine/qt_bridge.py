"""Qt timers behind the :class:`~blockchess.game.interfaces.IScheduler` API."""

from __future__ import annotations

from collections.abc import Callable

from PyQt6.QtCore import QTimer

from blockchess.game.interfaces import IScheduler, ScheduledCall


class QtScheduledCall(ScheduledCall):
    """One ``QTimer.singleShot`` callback that fires at most once.

    Cancelling only disarms the callback; the timer itself still expires
    and is discarded by Qt.
    """

    __slots__ = ("_callback", "_active")

    def __init__(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._active = True
        QTimer.singleShot(max(0, delay_ms), self._fire)

    @property
    def is_active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        self._active = False

    def _fire(self) -> None:
        if not self._active:
            return
        self._active = False
        self._callback()


class QtScheduler(IScheduler):
    """Schedules callbacks on the Qt event loop of the calling thread.

    A ``QCoreApplication`` (or ``QApplication``) must exist and be
    processing events for the callbacks to fire.
    """

    __slots__ = ()

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        return QtScheduledCall(delay_ms, callback)
