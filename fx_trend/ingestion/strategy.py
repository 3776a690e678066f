"""Abstractions for pluggable rate sources."""

from __future__ import annotations

from datetime import date
from typing import Protocol

from fx_trend.ingestion.models import RateQuote


class RateSource(Protocol):
    """Contract for fetching quotes and raw history.

    :class:`fx_trend.ingestion.rate_client.RateClient` is the HTTP
    implementation; the background worker accepts anything shaped like it.
    """

    def fetch_current(self, base: str, target: str, credential: str) -> RateQuote:
        ...  # pragma: no cover - protocol definition

    def fetch_historical(
        self,
        base: str,
        target: str,
        credential: str,
        days: int = 30,
        *,
        as_of: date | None = None,
    ) -> dict[date, float]:
        ...  # pragma: no cover - protocol definition


__all__ = ["RateSource"]
