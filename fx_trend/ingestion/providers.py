"""Endpoint descriptions for the supported exchange-rate providers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Mapping
from urllib.parse import quote

from fx_trend.utils.date_range import DateRange

DEFAULT_TIMEOUT = 30.0
REDACTED = "***"


class Provider(str, Enum):
    """Remote rate APIs with built-in endpoint templates."""

    EXCHANGERATE_API = "exchangerate-api"
    FRANKFURTER = "frankfurter"

    @classmethod
    def from_name(cls, name: str) -> "Provider":
        """Normalise user supplied provider names into a Provider value."""

        if not name:
            raise ValueError("Provider name must not be empty")
        lowered = name.strip().lower().replace("_", "-")
        if lowered in {"exchangerate-api", "exchangerate", "erapi", "v6"}:
            return cls.EXCHANGERATE_API
        if lowered in {"frankfurter", "ecb"}:
            return cls.FRANKFURTER
        raise ValueError(
            f"Unsupported provider: {name}. Supported values are "
            + ", ".join(member.value for member in cls)
        )


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """How to reach a provider and where its JSON keeps the rates.

    Path and query templates are ``str.format`` patterns over ``credential``,
    ``base``, ``target``, ``start`` and ``end``. ``rates_fields`` are tried in
    order and the first one holding a JSON object is used as the rate mapping.
    """

    name: str
    base_url: str
    latest_path: str
    history_path: str
    latest_query: tuple[tuple[str, str], ...] = ()
    history_query: tuple[tuple[str, str], ...] = ()
    rates_fields: tuple[str, ...] = ("conversion_rates", "rates", "result")
    error_field: str | None = "error-type"
    requires_credential: bool = True
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def for_provider(cls, provider: Provider | str) -> "ProviderConfig":
        if not isinstance(provider, Provider):
            provider = Provider.from_name(provider)
        return _BUILTIN_CONFIGS[provider]

    def with_timeout(self, timeout: float) -> "ProviderConfig":
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        return replace(self, timeout=float(timeout))

    def latest_request(
        self, base: str, target: str, credential: str, *, redact: bool = False
    ) -> tuple[str, dict[str, str]]:
        """Return ``(url, params)`` for the latest-rate endpoint."""

        values = self._template_values(base, target, credential, redact=redact)
        return self._url(self.latest_path, values, redact=redact), _format_query(self.latest_query, values)

    def history_request(
        self,
        base: str,
        target: str,
        credential: str,
        window: DateRange,
        *,
        redact: bool = False,
    ) -> tuple[str, dict[str, str]]:
        """Return ``(url, params)`` for the historical endpoint over ``window``."""

        values = self._template_values(base, target, credential, redact=redact)
        values["start"] = window.start.isoformat()
        values["end"] = window.end.isoformat()
        return self._url(self.history_path, values, redact=redact), _format_query(self.history_query, values)

    def _url(self, path: str, values: Mapping[str, str], *, redact: bool) -> str:
        # Path segments need the key percent-encoded; query values are encoded by requests.
        path_values = dict(values)
        if not redact:
            path_values["credential"] = quote(path_values["credential"], safe="")
        return self.base_url.rstrip("/") + path.format(**path_values)

    @staticmethod
    def _template_values(
        base: str, target: str, credential: str, *, redact: bool
    ) -> dict[str, str]:
        return {
            "credential": REDACTED if redact else credential or "",
            "base": base,
            "target": target,
        }


def _format_query(
    template: tuple[tuple[str, str], ...], values: Mapping[str, str]
) -> dict[str, str]:
    return {key: value.format(**values) for key, value in template}


_BUILTIN_CONFIGS: dict[Provider, ProviderConfig] = {
    Provider.EXCHANGERATE_API: ProviderConfig(
        name=Provider.EXCHANGERATE_API.value,
        base_url="https://v6.exchangerate-api.com/v6",
        latest_path="/{credential}/latest/{base}",
        history_path="/{credential}/history/{base}/{target}",
        history_query=(("start_date", "{start}"), ("end_date", "{end}")),
    ),
    Provider.FRANKFURTER: ProviderConfig(
        name=Provider.FRANKFURTER.value,
        base_url="https://api.frankfurter.app",
        latest_path="/latest",
        history_path="/{start}..{end}",
        latest_query=(("from", "{base}"), ("to", "{target}")),
        history_query=(("from", "{base}"), ("to", "{target}")),
        rates_fields=("rates",),
        error_field=None,
        requires_credential=False,
    ),
}


__all__ = ["DEFAULT_TIMEOUT", "Provider", "ProviderConfig", "REDACTED"]
