"""Time sources used by the access-log middleware to measure latency."""

import time
from datetime import timedelta
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float: ...

    def since(self, start: float) -> timedelta: ...


class RealClock:
    """Monotonic clock backed by :func:`time.perf_counter`."""

    def now(self) -> float:
        return time.perf_counter()

    def since(self, start: float) -> timedelta:
        return timedelta(seconds=time.perf_counter() - start)
