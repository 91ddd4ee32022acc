"""Time source for accrual and timeout windows.

All market timestamps are integer UNIX seconds. The engine reads the clock
once per operation so every rule inside one call sees the same instant.
"""

from datetime import datetime, timezone
from typing import Protocol

DAY_SECONDS = 24 * 60 * 60
WEEK_SECONDS = 7 * DAY_SECONDS
CHALLENGE_WINDOW_SECONDS = 7 * DAY_SECONDS


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


class Clock(Protocol):
    def now(self) -> int: ...


class SystemClock:
    """Wall clock, never steps backwards within a process."""

    def __init__(self) -> None:
        self._last = 0

    def now(self) -> int:
        self._last = max(self._last, int(utc_now().timestamp()))
        return self._last


class ManualClock:
    """Clock driven by hand — used by tests and simulations."""

    def __init__(self, start: int = 1_700_000_000) -> None:
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("clock cannot move backwards")
        self._now += seconds
        return self._now

    def set(self, timestamp: int) -> None:
        if timestamp < self._now:
            raise ValueError("clock cannot move backwards")
        self._now = timestamp
