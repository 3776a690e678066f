"""Turn raw ``date -> rate`` mappings into chartable series."""

from __future__ import annotations

from datetime import date
from typing import Mapping

from fx_trend.errors import EmptySeriesError, MalformedResponseError
from fx_trend.ingestion.models import HistoricalPoint, HistoricalSeries, is_valid_rate
from fx_trend.utils.date_range import parse_date


def _coerce_day(value: object) -> date:
    try:
        return parse_date(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise MalformedResponseError(f"Invalid series date: {value!r}") from exc


def normalize(raw_mapping: Mapping[date | str, float]) -> HistoricalSeries:
    """Return the observations of ``raw_mapping`` ordered by date.

    Values are carried over untouched and missing days are not filled in.
    """

    if not raw_mapping:
        raise EmptySeriesError("No historical rates to plot")

    points: dict[date, float] = {}
    for raw_day, value in raw_mapping.items():
        day = _coerce_day(raw_day)
        if not is_valid_rate(value):
            raise MalformedResponseError(f"Invalid rate for {day}: {value!r}")
        if day in points:
            raise MalformedResponseError(f"Duplicate series date: {day}")
        points[day] = value

    return HistoricalSeries(
        points=tuple(HistoricalPoint(rate_date=day, value=points[day]) for day in sorted(points))
    )


__all__ = ["normalize"]
