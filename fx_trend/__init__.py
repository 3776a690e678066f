"""Public interface for the fx_trend package."""

from __future__ import annotations

from datetime import date
from importlib import metadata as importlib_metadata

import requests

from fx_trend.errors import (
    AuthError,
    EmptySeriesError,
    ForexError,
    MalformedResponseError,
    NetworkError,
    QuotaExceededError,
    UnsupportedCurrencyError,
)
from fx_trend.ingestion.models import HistoricalPoint, HistoricalSeries, RateQuote
from fx_trend.ingestion.normalizer import normalize
from fx_trend.ingestion.providers import Provider, ProviderConfig
from fx_trend.ingestion.rate_client import RateClient, fetch_current, fetch_historical
from fx_trend.utils.date_range import MAX_HISTORY_DAYS

__all__ = [
    "__version__",
    "AuthError",
    "EmptySeriesError",
    "ForexError",
    "FxTrend",
    "HistoricalPoint",
    "HistoricalSeries",
    "MalformedResponseError",
    "NetworkError",
    "Provider",
    "ProviderConfig",
    "QuotaExceededError",
    "RateClient",
    "RateQuote",
    "UnsupportedCurrencyError",
    "fetch_current",
    "fetch_historical",
    "normalize",
]

try:
    __version__ = importlib_metadata.version("fx-trend")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"


class FxTrend:
    """Package facade bundling provider configuration and the fetch pipeline."""

    __slots__ = ("config", "client")

    __version__ = __version__

    def __init__(
        self,
        provider: Provider | str | ProviderConfig | None = None,
        *,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Select the provider to talk to.

        ``provider`` may be a :class:`Provider`, one of its names/aliases
        (``"frankfurter"``), or a fully custom :class:`ProviderConfig`. When
        omitted ExchangeRate-API is used. The API key is never stored here;
        pass it to each call.
        """

        self.config = self._build_config(provider, timeout)
        self.client = RateClient(self.config, session=session)

    @staticmethod
    def _build_config(
        provider: Provider | str | ProviderConfig | None, timeout: float | None
    ) -> ProviderConfig:
        if isinstance(provider, ProviderConfig):
            config = provider
        else:
            config = ProviderConfig.for_provider(provider or Provider.EXCHANGERATE_API)
        if timeout is not None:
            config = config.with_timeout(timeout)
        return config

    @property
    def provider_name(self) -> str:
        return self.config.name

    def rate(self, base: str, target: str, credential: str = "") -> RateQuote:
        """Return the current ``base``/``target`` quote."""

        return self.client.fetch_current(base, target, credential)

    def history(
        self,
        base: str,
        target: str,
        credential: str = "",
        days: int = MAX_HISTORY_DAYS,
        *,
        as_of: date | None = None,
    ) -> HistoricalSeries:
        """Return the trailing ``days`` of rates as an ascending series."""

        raw = self.client.fetch_historical(base, target, credential, days, as_of=as_of)
        return normalize(raw)
