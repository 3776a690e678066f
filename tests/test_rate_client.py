from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any

import pytest
import requests

from fx_trend.errors import (
    AuthError,
    MalformedResponseError,
    NetworkError,
    QuotaExceededError,
    UnsupportedCurrencyError,
)
from fx_trend.ingestion.normalizer import normalize
from fx_trend.ingestion.providers import Provider, ProviderConfig
from fx_trend.ingestion.rate_client import (
    RateClient,
    fetch_current,
    fetch_historical,
    parse_history_payload,
    parse_latest_payload,
)


class _FakeResponse:
    def __init__(self, body: Any = None, *, status_code: int = 200, text: str | None = None) -> None:
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(body)

    def json(self) -> Any:
        return json.loads(self.text)


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, *, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def _client(session: _FakeSession, provider: Provider = Provider.EXCHANGERATE_API) -> RateClient:
    return RateClient(ProviderConfig.for_provider(provider), session=session)


def test_fetch_current_returns_exact_value() -> None:
    session = _FakeSession(_FakeResponse({"result": {"EUR": 0.92}}))
    before = datetime.now(timezone.utc)

    quote = _client(session).fetch_current("USD", "EUR", "k1")

    assert quote.base == "USD"
    assert quote.target == "EUR"
    assert quote.value == 0.92
    assert before <= quote.retrieved_at <= datetime.now(timezone.utc)
    assert session.calls == [
        {"url": "https://v6.exchangerate-api.com/v6/k1/latest/USD", "params": None, "timeout": 30.0}
    ]


def test_fetch_current_reads_exchangerate_api_shape() -> None:
    body = {
        "result": "success",
        "base_code": "USD",
        "conversion_rates": {"USD": 1, "EUR": 0.9213456789, "JPY": 151.2},
    }
    quote = _client(_FakeSession(_FakeResponse(body))).fetch_current("usd", "jpy", "k1")

    assert quote.pair == "USD/JPY"
    assert quote.value == 151.2


def test_fetch_current_missing_target_is_unsupported() -> None:
    session = _FakeSession(_FakeResponse({"conversion_rates": {"GBP": 0.79}}))

    with pytest.raises(UnsupportedCurrencyError) as excinfo:
        _client(session).fetch_current("USD", "EUR", "k1")
    assert excinfo.value.currency == "EUR"


def test_fetch_current_http_401_is_auth_error() -> None:
    session = _FakeSession(_FakeResponse(text="Unauthorized", status_code=401))

    with pytest.raises(AuthError):
        _client(session).fetch_current("USD", "EUR", "k1")


@pytest.mark.parametrize(
    "error_type, status, expected",
    [
        ("invalid-key", 403, AuthError),
        ("inactive-account", 200, AuthError),
        ("unsupported-code", 404, UnsupportedCurrencyError),
        ("quota-reached", 429, QuotaExceededError),
        ("malformed-request", 400, MalformedResponseError),
    ],
)
def test_provider_error_types_are_mapped(error_type, status, expected) -> None:
    body = {"result": "error", "error-type": error_type}
    session = _FakeSession(_FakeResponse(body, status_code=status))

    with pytest.raises(expected):
        _client(session).fetch_current("USD", "EUR", "k1")


@pytest.mark.parametrize(
    "status, expected",
    [
        (403, AuthError),
        (404, UnsupportedCurrencyError),
        (429, QuotaExceededError),
        (500, NetworkError),
        (503, NetworkError),
        (418, MalformedResponseError),
    ],
)
def test_http_statuses_are_mapped(status, expected) -> None:
    session = _FakeSession(_FakeResponse(text="nope", status_code=status))

    with pytest.raises(expected):
        _client(session).fetch_current("USD", "EUR", "k1")


def test_quota_error_is_a_network_error() -> None:
    assert issubclass(QuotaExceededError, NetworkError)


@pytest.mark.parametrize(
    "exc",
    [
        requests.ConnectionError("Max retries exceeded with url: /v6/secret-key/latest/USD"),
        requests.Timeout("read timed out"),
    ],
)
def test_transport_failures_become_network_errors(exc) -> None:
    session = _FakeSession(error=exc)

    with pytest.raises(NetworkError) as excinfo:
        _client(session).fetch_current("USD", "EUR", "secret-key")
    assert "secret-key" not in str(excinfo.value)
    assert excinfo.value.__cause__ is exc
    assert len(session.calls) == 1


@pytest.mark.parametrize("text", ["<html>oops</html>", '{"conversion_rates": {"EUR": 0.9', ""])
def test_non_json_body_is_malformed_for_both_endpoints(text) -> None:
    client = _client(_FakeSession(_FakeResponse(text=text)))

    with pytest.raises(MalformedResponseError):
        client.fetch_current("USD", "EUR", "k1")
    with pytest.raises(MalformedResponseError):
        client.fetch_historical("USD", "EUR", "k1", 30, as_of=date(2024, 1, 30))


@pytest.mark.parametrize(
    "body",
    [
        [0.92],
        {"base_code": "USD"},
        {"conversion_rates": {"EUR": "0.92"}},
        {"conversion_rates": {"EUR": -1}},
        {"conversion_rates": {"EUR": 0}},
        {"conversion_rates": {"EUR": None}},
        {"conversion_rates": {"EUR": True}},
    ],
)
def test_unexpected_shapes_are_malformed(body) -> None:
    with pytest.raises(MalformedResponseError):
        _client(_FakeSession(_FakeResponse(body))).fetch_current("USD", "EUR", "k1")


def test_blank_credential_is_rejected_before_sending() -> None:
    session = _FakeSession(_FakeResponse({"result": {"EUR": 0.92}}))

    with pytest.raises(AuthError):
        _client(session).fetch_current("USD", "EUR", "   ")
    assert session.calls == []


def test_invalid_currency_code_is_rejected_before_sending() -> None:
    session = _FakeSession(_FakeResponse({"result": {"EUR": 0.92}}))

    with pytest.raises(ValueError):
        _client(session).fetch_current("US", "EUR", "k1")
    assert session.calls == []


def test_credential_is_url_quoted() -> None:
    session = _FakeSession(_FakeResponse({"result": {"EUR": 0.92}}))

    _client(session).fetch_current("USD", "EUR", "a/b c")

    assert session.calls[0]["url"] == "https://v6.exchangerate-api.com/v6/a%2Fb%20c/latest/USD"


def test_fetch_historical_requests_trailing_window() -> None:
    session = _FakeSession(_FakeResponse({"rates": {}}))

    history = _client(session).fetch_historical("USD", "EUR", "k1", 30, as_of=date(2024, 3, 30))

    assert history == {}
    call = session.calls[0]
    assert call["url"] == "https://v6.exchangerate-api.com/v6/k1/history/USD/EUR"
    assert call["params"] == {"start_date": "2024-03-01", "end_date": "2024-03-30"}


def test_fetch_historical_passes_gaps_through() -> None:
    as_of = date(2024, 3, 30)
    all_days = [as_of - timedelta(days=offset) for offset in range(30)]
    missing = {all_days[3], all_days[10]}
    rates = {
        day.isoformat(): {"EUR": round(0.9 + index / 1000, 6)}
        for index, day in enumerate(all_days)
        if day not in missing
    }
    session = _FakeSession(_FakeResponse({"rates": rates}))

    history = _client(session).fetch_historical("USD", "EUR", "k1", 30, as_of=as_of)
    series = normalize(history)

    assert len(history) == 28
    assert len(series) == 28
    assert series.dates() == sorted(set(all_days) - missing)
    assert not missing & set(series.dates())


def test_fetch_historical_no_data_available_returns_empty_mapping() -> None:
    body = {"result": "error", "error-type": "no-data-available"}
    session = _FakeSession(_FakeResponse(body, status_code=404))

    assert _client(session).fetch_historical("USD", "EUR", "k1", 5, as_of=date(2024, 1, 5)) == {}


def test_fetch_historical_rejects_windows_over_thirty_days() -> None:
    session = _FakeSession(_FakeResponse({"rates": {}}))

    with pytest.raises(ValueError):
        _client(session).fetch_historical("USD", "EUR", "k1", 31)
    assert session.calls == []


def test_frankfurter_requests_need_no_credential() -> None:
    latest = _FakeSession(_FakeResponse({"amount": 1.0, "base": "EUR", "rates": {"SEK": 11.2}}))
    quote = _client(latest, Provider.FRANKFURTER).fetch_current("EUR", "SEK", "")

    assert quote.value == 11.2
    assert latest.calls[0]["url"] == "https://api.frankfurter.app/latest"
    assert latest.calls[0]["params"] == {"from": "EUR", "to": "SEK"}

    history = _FakeSession(_FakeResponse({"rates": {"2024-01-02": {"SEK": 11.1}}}))
    raw = _client(history, Provider.FRANKFURTER).fetch_historical(
        "EUR", "SEK", "", 3, as_of=date(2024, 1, 3)
    )

    assert raw == {date(2024, 1, 2): 11.1}
    assert history.calls[0]["url"] == "https://api.frankfurter.app/2024-01-01..2024-01-03"


def test_parse_history_payload_accepts_bare_numbers() -> None:
    payload = {"rates": {"2024-01-02": 0.91, "2024-01-01": 0.9}}

    assert parse_history_payload(payload, "EUR") == {date(2024, 1, 2): 0.91, date(2024, 1, 1): 0.9}


def test_parse_history_payload_skips_days_without_target() -> None:
    payload = {"rates": {"2024-01-01": {"EUR": 0.9}, "2024-01-02": {"GBP": 0.8}}}

    assert parse_history_payload(payload, "EUR") == {date(2024, 1, 1): 0.9}


def test_parse_history_payload_target_absent_everywhere_is_unsupported() -> None:
    payload = {"rates": {"2024-01-01": {"GBP": 0.8}, "2024-01-02": {"GBP": 0.81}}}

    with pytest.raises(UnsupportedCurrencyError):
        parse_history_payload(payload, "EUR")


@pytest.mark.parametrize(
    "payload",
    [
        {"rates": {"01/02/2024": {"EUR": 0.9}}},
        {"rates": {"2024-01-01": {"EUR": "n/a"}}},
        {"rates": {"2024-01-01": [0.9]}},
        {"history": {}},
    ],
)
def test_parse_history_payload_rejects_bad_shapes(payload) -> None:
    with pytest.raises(MalformedResponseError):
        parse_history_payload(payload, "EUR")


def test_parse_latest_payload_uses_configured_fields() -> None:
    config = ProviderConfig.for_provider(Provider.FRANKFURTER)

    assert parse_latest_payload({"rates": {"USD": 1.08}}, "USD", config) == 1.08
    with pytest.raises(MalformedResponseError):
        parse_latest_payload({"conversion_rates": {"USD": 1.08}}, "USD", config)


def test_module_level_helpers_delegate_to_client() -> None:
    session = _FakeSession(_FakeResponse({"conversion_rates": {"EUR": 0.92}}))
    quote = fetch_current("USD", "EUR", "k1", session=session)
    assert quote.value == 0.92

    session = _FakeSession(_FakeResponse({"rates": {"2024-01-01": {"EUR": 0.9}}}))
    raw = fetch_historical("USD", "EUR", "k1", 2, as_of=date(2024, 1, 2), session=session)
    assert raw == {date(2024, 1, 1): 0.9}


def test_default_session_is_used_when_none_injected(monkeypatch) -> None:
    created: list[_FakeSession] = []

    class _ContextSession(_FakeSession):
        def __enter__(self):
            return self

        def __exit__(self, *exc) -> None:
            return None

    def _factory():
        session = _ContextSession(_FakeResponse({"conversion_rates": {"EUR": 0.92}}))
        created.append(session)
        return session

    monkeypatch.setattr("fx_trend.ingestion.rate_client.requests.Session", _factory)
    client = RateClient()

    client.fetch_current("USD", "EUR", "k1")
    client.fetch_current("USD", "EUR", "k2")

    assert len(created) == 2
    assert created[1].calls[0]["url"].endswith("/k2/latest/USD")


def test_fetch_historical_logs_missing_and_out_of_window_days(caplog) -> None:
    rates = {
        "2024-01-01": {"EUR": 0.9},
        "2024-01-03": {"EUR": 0.91},
        "2024-02-01": {"EUR": 0.95},
    }
    session = _FakeSession(_FakeResponse({"rates": rates}))

    with caplog.at_level(logging.DEBUG, logger="fx_trend.ingestion.rate_client"):
        history = _client(session).fetch_historical("USD", "EUR", "k1", 3, as_of=date(2024, 1, 3))

    assert history == {date(2024, 1, 1): 0.9, date(2024, 1, 3): 0.91, date(2024, 2, 1): 0.95}
    assert "Received 3 of 3 days for USD/EUR (1 without a rate)" in caplog.text
    assert "No USD/EUR rate on: 2024-01-02" in caplog.text
    assert "1 USD/EUR days outside 2024-01-01..2024-01-03: 2024-02-01" in caplog.text
