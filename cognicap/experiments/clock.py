"""
Clock — the time source and delay primitive used by experiment runs.

SystemClock waits for real. VirtualClock advances instantly, which keeps
experiment runs deterministic and fast under test:

    clock = VirtualClock()
    clock.sleep_ms(150)
    assert clock.now_ms() == 150
"""

from __future__ import annotations

import threading
import time
from typing import Optional, Protocol

from ..errors import ExperimentCancelled


class Clock(Protocol):
    def now_ms(self) -> float: ...

    def sleep_ms(self, ms: float) -> None: ...


class SystemClock:

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0

    def sleep_ms(self, ms: float) -> None:
        time.sleep(ms / 1000.0)


class VirtualClock:

    def __init__(self, start_ms: float = 0.0):
        self._now = start_ms
        self.slept_ms = 0.0      # total requested delay

    def now_ms(self) -> float:
        return self._now

    def sleep_ms(self, ms: float) -> None:
        self.advance(ms)
        self.slept_ms += ms

    def advance(self, ms: float) -> None:
        self._now += ms


class CancelToken:
    """
    Cooperative cancellation for long experiment runs. Checked by the engine
    at every sample boundary; set explicitly with `cancel()` or implicitly
    once an optional deadline on *clock* passes.
    """

    def __init__(self, clock: Optional[Clock] = None, deadline_ms: Optional[float] = None):
        self._event = threading.Event()
        self._clock = clock
        self._deadline_ms = deadline_ms

    @classmethod
    def after(cls, clock: Clock, budget_ms: float) -> "CancelToken":
        return cls(clock=clock, deadline_ms=clock.now_ms() + budget_ms)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._clock is not None and self._deadline_ms is not None:
            return self._clock.now_ms() >= self._deadline_ms
        return False

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise ExperimentCancelled("experiment run cancelled")
