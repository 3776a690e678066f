"""HTTP client for current and historical exchange rates."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Mapping

import requests

from fx_trend.errors import (
    AuthError,
    MalformedResponseError,
    NetworkError,
    QuotaExceededError,
    UnsupportedCurrencyError,
)
from fx_trend.ingestion.models import RateQuote, is_valid_rate
from fx_trend.ingestion.providers import Provider, ProviderConfig
from fx_trend.utils.currencies import normalise_currency_code
from fx_trend.utils.date_range import MAX_HISTORY_DAYS, parse_date, trailing_window
from fx_trend.utils.logger import get_logger

LOGGER = get_logger(__name__)

AUTH_ERROR_TYPES = frozenset({"invalid-key", "inactive-account", "plan-upgrade-required"})
UNSUPPORTED_ERROR_TYPES = frozenset({"unsupported-code"})
QUOTA_ERROR_TYPES = frozenset({"quota-reached"})
NO_DATA_ERROR_TYPES = frozenset({"no-data-available"})


class _NoDataAvailable(MalformedResponseError):
    """Provider has no observations for the requested window."""


class RateClient:
    """Fetch quotes and raw historical rates from a configured provider.

    The client keeps no credential: every call receives it by value. Without an
    explicit ``session`` each request runs on a short-lived
    :class:`requests.Session`.
    """

    def __init__(
        self,
        config: ProviderConfig | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or ProviderConfig.for_provider(Provider.EXCHANGERATE_API)
        self.session = session

    def fetch_current(self, base: str, target: str, credential: str) -> RateQuote:
        """Return the latest ``base``/``target`` quote."""

        base = normalise_currency_code(base)
        target = normalise_currency_code(target)
        self._check_credential(credential)
        url, params = self.config.latest_request(base, target, credential)
        safe_url, _ = self.config.latest_request(base, target, credential, redact=True)

        retrieved_at = datetime.now(timezone.utc)
        LOGGER.info("Fetching latest %s/%s rate from %s", base, target, safe_url)
        payload = self._get_json(url, params, safe_url)
        value = parse_latest_payload(payload, target, self.config)
        LOGGER.info("Latest %s/%s rate is %s", base, target, value)
        return RateQuote(base=base, target=target, value=value, retrieved_at=retrieved_at)

    def fetch_historical(
        self,
        base: str,
        target: str,
        credential: str,
        days: int = MAX_HISTORY_DAYS,
        *,
        as_of: date | None = None,
    ) -> dict[date, float]:
        """Return the provider's ``date -> rate`` mapping for the trailing window.

        Dates the provider skips (weekends, holidays) are simply absent from
        the result.
        """

        base = normalise_currency_code(base)
        target = normalise_currency_code(target)
        window = trailing_window(days, as_of=as_of)
        self._check_credential(credential)
        url, params = self.config.history_request(base, target, credential, window)
        safe_url, _ = self.config.history_request(base, target, credential, window, redact=True)

        LOGGER.info(
            "Fetching %s/%s rates from %s to %s via %s",
            base,
            target,
            window.start,
            window.end,
            safe_url,
        )
        try:
            payload = self._get_json(url, params, safe_url)
        except _NoDataAvailable:
            LOGGER.warning("Provider has no %s/%s data between %s and %s", base, target, *window.as_tuple())
            return {}
        history = parse_history_payload(payload, target, self.config)
        outside = sorted(day for day in history if day not in window)
        if outside:
            LOGGER.warning(
                "Provider returned %s %s/%s days outside %s..%s: %s",
                len(outside),
                base,
                target,
                window.start,
                window.end,
                ", ".join(day.isoformat() for day in outside),
            )
        missing = [day for day in window.days() if day not in history]
        LOGGER.info(
            "Received %s of %s days for %s/%s (%s without a rate)",
            len(history),
            len(window),
            base,
            target,
            len(missing),
        )
        if missing:
            LOGGER.debug("No %s/%s rate on: %s", base, target, ", ".join(day.isoformat() for day in missing))
        return history

    def _check_credential(self, credential: str) -> None:
        if self.config.requires_credential and not (credential or "").strip():
            raise AuthError(f"An API key is required by {self.config.name}")

    def _send(self, url: str, params: dict[str, str]) -> requests.Response:
        if self.session is not None:
            return self.session.get(url, params=params or None, timeout=self.config.timeout)
        with requests.Session() as session:
            return session.get(url, params=params or None, timeout=self.config.timeout)

    def _get_json(self, url: str, params: dict[str, str], safe_url: str) -> dict[str, Any]:
        # Transport messages embed the request URL, so only the type is reported.
        try:
            response = self._send(url, params)
        except requests.Timeout as exc:
            raise NetworkError(
                f"Request to {safe_url} timed out after {self.config.timeout:g}s"
            ) from exc
        except requests.RequestException as exc:
            raise NetworkError(f"Request to {safe_url} failed ({type(exc).__name__})") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        error_type = self._provider_error_type(payload)
        status = response.status_code
        if error_type is not None or not 200 <= status < 300:
            LOGGER.warning(
                "%s answered HTTP %s (error type: %s) for %s",
                self.config.name,
                status,
                error_type or "n/a",
                safe_url,
            )
            _raise_for_error(status, error_type, safe_url)

        if payload is None:
            raise MalformedResponseError(f"Response from {safe_url} is not valid JSON")
        if not isinstance(payload, dict):
            raise MalformedResponseError(
                f"Response from {safe_url} is a JSON {type(payload).__name__}, expected an object"
            )
        return payload

    def _provider_error_type(self, payload: object) -> str | None:
        field = self.config.error_field
        if field is None or not isinstance(payload, dict):
            return None
        value = payload.get(field)
        return str(value) if value else None


def _raise_for_error(status: int, error_type: str | None, safe_url: str) -> None:
    if error_type in AUTH_ERROR_TYPES:
        raise AuthError(f"Provider rejected the API key ({error_type})")
    if error_type in UNSUPPORTED_ERROR_TYPES:
        raise UnsupportedCurrencyError(f"Provider does not support the requested currency ({error_type})")
    if error_type in QUOTA_ERROR_TYPES:
        raise QuotaExceededError(f"Provider quota exhausted ({error_type})")
    if error_type in NO_DATA_ERROR_TYPES:
        raise _NoDataAvailable(f"Provider has no data for {safe_url}")
    if status in {401, 403}:
        raise AuthError(f"Provider rejected the API key (HTTP {status})")
    if status == 404:
        raise UnsupportedCurrencyError(f"Provider has no rates for {safe_url} (HTTP 404)")
    if status == 429:
        raise QuotaExceededError("Provider rate limit reached (HTTP 429)")
    if status >= 500:
        raise NetworkError(f"Provider unavailable (HTTP {status}) for {safe_url}")
    if error_type is not None:
        raise MalformedResponseError(f"Provider reported error {error_type!r} for {safe_url}")
    raise MalformedResponseError(f"Unexpected HTTP {status} from {safe_url}")


def _rates_mapping(payload: object, config: ProviderConfig) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise MalformedResponseError("Response body is not a JSON object")
    for field in config.rates_fields:
        candidate = payload.get(field)
        if isinstance(candidate, Mapping):
            return candidate
    raise MalformedResponseError(
        "Response lacks a rate mapping (expected one of: " + ", ".join(config.rates_fields) + ")"
    )


def _coerce_rate(value: object, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedResponseError(f"Rate for {label} is not a number: {value!r}")
    rate = float(value)
    if not is_valid_rate(rate):
        raise MalformedResponseError(f"Rate for {label} must be positive and finite: {value!r}")
    return rate


def _coerce_date(value: object) -> date:
    try:
        return parse_date(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise MalformedResponseError(f"Invalid date key in history: {value!r}") from exc


def parse_latest_payload(
    payload: object, target: str, config: ProviderConfig | None = None
) -> float:
    """Extract the ``target`` rate from a latest-rate response body."""

    config = config or ProviderConfig.for_provider(Provider.EXCHANGERATE_API)
    rates = _rates_mapping(payload, config)
    if target not in rates:
        raise UnsupportedCurrencyError(f"{target} is not present in the provider rates", currency=target)
    return _coerce_rate(rates[target], target)


def parse_history_payload(
    payload: object, target: str, config: ProviderConfig | None = None
) -> dict[date, float]:
    """Extract ``date -> rate`` pairs for ``target`` from a history response body.

    Each day maps either to an object keyed by currency or directly to a
    number. Days without ``target`` are left out; if every day lacks it the
    currency is treated as unsupported.
    """

    config = config or ProviderConfig.for_provider(Provider.EXCHANGERATE_API)
    rates = _rates_mapping(payload, config)
    history: dict[date, float] = {}
    days_without_target = 0
    for raw_day, day_rates in rates.items():
        rate_date = _coerce_date(raw_day)
        if isinstance(day_rates, Mapping):
            if target not in day_rates:
                days_without_target += 1
                continue
            value = day_rates[target]
        else:
            value = day_rates
        history[rate_date] = _coerce_rate(value, f"{target} on {rate_date}")

    if not history and days_without_target:
        raise UnsupportedCurrencyError(
            f"{target} is not present in any of the {days_without_target} returned days",
            currency=target,
        )
    LOGGER.debug("Parsed %s history rows for %s (%s days without it)", len(history), target, days_without_target)
    return history


def fetch_current(
    base: str,
    target: str,
    credential: str,
    *,
    config: ProviderConfig | None = None,
    session: requests.Session | None = None,
) -> RateQuote:
    """Fetch one quote with a throwaway :class:`RateClient`."""

    return RateClient(config, session=session).fetch_current(base, target, credential)


def fetch_historical(
    base: str,
    target: str,
    credential: str,
    days: int = MAX_HISTORY_DAYS,
    *,
    as_of: date | None = None,
    config: ProviderConfig | None = None,
    session: requests.Session | None = None,
) -> dict[date, float]:
    """Fetch a raw history mapping with a throwaway :class:`RateClient`."""

    return RateClient(config, session=session).fetch_historical(
        base, target, credential, days, as_of=as_of
    )


__all__ = [
    "RateClient",
    "fetch_current",
    "fetch_historical",
    "parse_history_payload",
    "parse_latest_payload",
]
