from __future__ import annotations

import heapq
import itertools
from dataclasses import replace
from typing import Callable

import pytest

from cardduel.engine.types import Rules
from cardduel.services.rules import load_default_rules


class ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock. Timers only fire when the test calls `advance`."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self._seq = itertools.count()
        self._queue: list[tuple[float, int, ManualHandle, Callable[..., object], tuple[object, ...]]] = []

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[..., object], *args: object) -> ManualHandle:
        handle = ManualHandle()
        heapq.heappush(self._queue, (self.now + delay, next(self._seq), handle, callback, args))
        return handle

    def pending(self) -> int:
        return sum(1 for entry in self._queue if not entry[2].cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, handle, callback, args = heapq.heappop(self._queue)
            self.now = when
            if not handle.cancelled:
                callback(*args)
        self.now = target


@pytest.fixture
def rules() -> Rules:
    return load_default_rules()


@pytest.fixture
def fast_rules(rules: Rules) -> Rules:
    return replace(rules, intermission_seconds=0.0)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()
