"""Date helpers for building historical request windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, Tuple

MAX_HISTORY_DAYS = 30


@dataclass(frozen=True)
class DateRange:
    """Container representing a closed date range."""

    start: date
    end: date

    def as_tuple(self) -> Tuple[date, date]:
        """Return the range as a tuple of ``(start, end)``."""
        return (self.start, self.end)

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.start <= day <= self.end

    def days(self) -> Iterator[date]:
        """Yield every calendar day of the range in ascending order."""

        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)


def parse_date(value: str | date) -> date:
    """Parse a date string in ISO format to :class:`date`."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def trailing_window(days: int = MAX_HISTORY_DAYS, *, as_of: str | date | None = None) -> DateRange:
    """Return the ``days`` calendar days ending at ``as_of`` (inclusive).

    ``as_of`` defaults to today. Windows longer than :data:`MAX_HISTORY_DAYS`
    are rejected.
    """

    if isinstance(days, bool) or not isinstance(days, int):
        raise ValueError("days must be an integer")
    if not 1 <= days <= MAX_HISTORY_DAYS:
        raise ValueError(f"days must be between 1 and {MAX_HISTORY_DAYS}")
    end_date = parse_date(as_of) if as_of is not None else date.today()
    return DateRange(start=end_date - timedelta(days=days - 1), end=end_date)


__all__ = ["DateRange", "MAX_HISTORY_DAYS", "parse_date", "trailing_window"]
