"""Injectable clock.

Ledger and reporting code takes an optional ``clock`` argument instead of
calling ``timezone.now()`` directly, so "today" and rolling windows are
deterministic under test.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from django.utils import timezone


class Clock(ABC):
    """Source of the current instant (always timezone-aware)."""

    @abstractmethod
    def now(self) -> datetime:
        ...

    def local_now(self) -> datetime:
        return timezone.localtime(self.now())

    def start_of_today(self) -> datetime:
        """Local midnight of the current day."""
        return self.local_now().replace(hour=0, minute=0, second=0, microsecond=0)

    def end_of_today(self) -> datetime:
        return self.start_of_today() + timedelta(days=1) - timedelta(microseconds=1)


class SystemClock(Clock):
    """Wall-clock time from Django (UTC when ``USE_TZ`` is on)."""

    def now(self) -> datetime:
        return timezone.now()


class FixedClock(Clock):
    """Clock frozen at a given instant; ``advance`` moves it forward."""

    def __init__(self, instant: datetime):
        if timezone.is_naive(instant):
            raise ValueError("FixedClock requires a timezone-aware datetime.")
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, **delta) -> datetime:
        self._instant = self._instant + timedelta(**delta)
        return self._instant


def get_clock(clock: Clock | None = None) -> Clock:
    """Return *clock*, or the system clock when none is injected."""
    return clock if clock is not None else SystemClock()
