"""Data models shared across ingestion modules."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Iterator

from fx_trend.utils.currencies import normalise_currency_code

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    import pandas as pd


def is_valid_rate(value: object) -> bool:
    """Return True for a positive, finite, non-boolean number."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def _check_rate(value: object, label: str) -> None:
    if not is_valid_rate(value):
        raise ValueError(f"Rate for {label} must be a positive finite number: {value!r}")


@dataclass(frozen=True, slots=True)
class RateQuote:
    """A single point-in-time conversion rate between two currencies."""

    base: str
    target: str
    value: float
    retrieved_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "base", normalise_currency_code(self.base))
        object.__setattr__(self, "target", normalise_currency_code(self.target))
        _check_rate(self.value, f"{self.base}/{self.target}")

    @property
    def pair(self) -> str:
        return f"{self.base}/{self.target}"


@dataclass(frozen=True, slots=True)
class HistoricalPoint:
    """One daily rate observation."""

    rate_date: date
    value: float

    def __post_init__(self) -> None:
        _check_rate(self.value, str(self.rate_date))


@dataclass(frozen=True, slots=True)
class HistoricalSeries:
    """Daily observations with unique dates in ascending order.

    Series are built by :func:`fx_trend.ingestion.normalizer.normalize` and
    are never mutated afterwards; gaps in the provider data stay gaps.
    """

    points: tuple[HistoricalPoint, ...]

    def __post_init__(self) -> None:
        points = tuple(self.points)
        for previous, current in zip(points, points[1:]):
            if current.rate_date <= previous.rate_date:
                raise ValueError(
                    "Series dates must be unique and ascending: "
                    f"{previous.rate_date} is followed by {current.rate_date}"
                )
        object.__setattr__(self, "points", points)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[HistoricalPoint]:
        return iter(self.points)

    @property
    def first(self) -> HistoricalPoint:
        return self.points[0]

    @property
    def last(self) -> HistoricalPoint:
        return self.points[-1]

    def dates(self) -> list[date]:
        return [point.rate_date for point in self.points]

    def values(self) -> list[float]:
        return [point.value for point in self.points]

    def as_mapping(self) -> dict[date, float]:
        """Return the ``date -> rate`` mapping the series was built from."""

        return {point.rate_date: point.value for point in self.points}

    def to_frame(self) -> "pd.DataFrame":
        """Return a ``date``/``rate`` DataFrame for plotting."""

        import pandas as pd

        return pd.DataFrame(
            {
                "date": pd.to_datetime(self.dates()),
                "rate": self.values(),
            }
        )


__all__ = ["HistoricalPoint", "HistoricalSeries", "RateQuote", "is_valid_rate"]
