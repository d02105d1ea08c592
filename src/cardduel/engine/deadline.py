from __future__ import annotations

from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Minimal clock + timer surface. `asyncio.AbstractEventLoop` satisfies it."""

    def time(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[..., object], *args: object) -> TimerHandle: ...


class Deadline:
    """A single cancellable timer with fire-once semantics.

    Arming replaces any pending timer. A callback from a replaced or cancelled
    timer is ignored even if the scheduler still delivers it.
    """

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._handle: TimerHandle | None = None
        self._generation = 0
        self.expires_at: float | None = None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def remaining(self) -> float:
        if self.expires_at is None:
            return 0.0
        return max(0.0, self.expires_at - self._scheduler.time())

    def arm(self, delay: float, callback: Callable[[], object]) -> float:
        self.cancel()
        generation = self._generation
        self.expires_at = self._scheduler.time() + delay
        self._handle = self._scheduler.call_later(delay, self._fire, generation, callback)
        return self.expires_at

    def cancel(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.expires_at = None

    def _fire(self, generation: int, callback: Callable[[], object]) -> None:
        if generation != self._generation or self._handle is None:
            return
        self._handle = None
        self.expires_at = None
        self._generation += 1
        callback()
