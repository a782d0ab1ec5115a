"""Clock helpers for the driver: day/night mapping and a manual test clock."""

from __future__ import annotations

from datetime import datetime

DAY_START_HOUR = 6
DAY_END_HOUR = 22


def is_daytime(hour: float, start: float = DAY_START_HOUR, end: float = DAY_END_HOUR) -> bool:
    """Return ``True`` when *hour* lies strictly inside ``(start, end)``."""
    return start < hour < end


def local_hour(now: datetime | None = None) -> float:
    """Fractional hour of day (0–24) for the local wall clock."""
    now = now or datetime.now()
    return now.hour + now.minute / 60 + now.second / 3600


def day_fraction(hour: float) -> float:
    """Map an hour of day onto [0, 1)."""
    return (hour % 24) / 24


class ManualClock:
    """Monotonic clock advanced by hand.

    Drop-in replacement for :func:`time.monotonic` in simulations and tests.
    """

    def __init__(self, start: float = 0.0, hour: float = 12.0) -> None:
        self._now = start
        self._hour = hour % 24

    def __call__(self) -> float:
        return self._now

    def advance(self, seconds: float) -> float:
        if seconds < 0:
            raise ValueError("ManualClock cannot run backwards")
        self._now += seconds
        self._hour = (self._hour + seconds / 3600) % 24
        return self._now

    def hour(self) -> float:
        """Simulated hour of day, advancing together with the clock."""
        return self._hour

    def set_hour(self, hour: float) -> None:
        self._hour = hour % 24
