"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

import os
import random
import sys
from collections.abc import Callable, Iterator

import pytest

from blockchess.config import AppSettings
from blockchess.engine.difficulty import DifficultyPolicy
from blockchess.game.controller import GameController
from blockchess.game.interfaces import IScheduler, ScheduledCall

# Linux CI runners are often headless. Force an offscreen backend only there.
if (
    sys.platform.startswith("linux")
    and "QT_QPA_PLATFORM" not in os.environ
    and "DISPLAY" not in os.environ
    and "WAYLAND_DISPLAY" not in os.environ
):
    os.environ["QT_QPA_PLATFORM"] = "offscreen"


class ManualCall(ScheduledCall):
    def __init__(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.delay_ms = delay_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def is_active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.is_active:
            self.fired = True
            self.callback()


class ManualScheduler(IScheduler):
    """Records scheduled callbacks; tests decide when time passes."""

    def __init__(self) -> None:
        self.calls: list[ManualCall] = []

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        call = ManualCall(delay_ms, callback)
        self.calls.append(call)
        return call

    @property
    def pending(self) -> list[ManualCall]:
        return [c for c in self.calls if c.is_active]

    def run_pending(self) -> int:
        """Fire the callbacks pending right now (not ones they schedule)."""
        due = self.pending
        for call in due:
            call.fire()
        return len(due)

    def run_all(self, limit: int = 50) -> None:
        for _ in range(limit):
            if not self.run_pending():
                return
        raise AssertionError("scheduler did not settle")


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def make_controller(
    scheduler: ManualScheduler,
) -> Callable[..., GameController]:
    """Factory for controllers on the manual scheduler with a seeded AI."""

    def _make(seed: int = 7, **overrides: object) -> GameController:
        settings = AppSettings(**overrides)
        policy = DifficultyPolicy(rng=random.Random(seed))
        return GameController(settings, scheduler=scheduler, policy=policy)

    return _make


@pytest.fixture(scope="session")
def qapp() -> Iterator[object]:
    """Provide a singleton QCoreApplication for timer-based tests."""
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app
