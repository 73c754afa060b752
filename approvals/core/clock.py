"""Injectable time source.

"Today" is always derived at call time in UTC, matching the date the
browser client used to send (``toISOString`` date part).
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock pinned to a given instant; tests move it with :meth:`advance_to`."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance_to(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant


def today(clock: Clock) -> date:
    return clock.now().astimezone(timezone.utc).date()


def today_range(clock: Clock) -> tuple[date, date]:
    """Return the ``(fecha_desde, fecha_hasta)`` pair covering the current day."""

    current = today(clock)
    return current, current
