"""
Injectable time source.

The reference stores stamp receipts (``created_at``), inventory postings
(``posted_at``) and document numbers (``REC-<year>-``, ``BILL-<year>-``)
from a ``Clock`` passed to their constructor, never from
``datetime.now()``, so the same delivery replayed under a
``DeterministicClock`` produces the same numbers and timestamps.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):
    """Source of timezone-aware UTC datetimes."""

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        """Calendar date of ``now()`` in UTC."""
        return self.now().date()


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Frozen clock for tests.

    ``now()`` is stable until ``advance()`` or ``set_time()``; the default
    instant is 2025-01-15 12:00 UTC.
    """

    DEFAULT_INSTANT = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def __init__(self, fixed_time: datetime | None = None):
        self._current = fixed_time or self.DEFAULT_INSTANT

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = time

    def advance(self, seconds: int | float = 1) -> None:
        self._current += timedelta(seconds=seconds)
