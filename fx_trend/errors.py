"""Exceptions raised by the rate client and the series normalizer."""

from __future__ import annotations


class ForexError(Exception):
    """Base class for every failure surfaced by fx_trend."""


class NetworkError(ForexError):
    """Transport failure: unreachable host, refused or reset connection, timeout."""


class QuotaExceededError(NetworkError):
    """The provider refused the request because the plan quota is used up."""


class AuthError(ForexError):
    """The provider rejected the credential, or none was supplied."""


class UnsupportedCurrencyError(ForexError):
    """The requested currency is not present in the provider response."""

    def __init__(self, message: str, *, currency: str | None = None) -> None:
        super().__init__(message)
        self.currency = currency


class MalformedResponseError(ForexError):
    """The response body is not JSON or lacks the expected shape."""


class EmptySeriesError(ForexError):
    """Normalization was given no usable points."""


__all__ = [
    "AuthError",
    "EmptySeriesError",
    "ForexError",
    "MalformedResponseError",
    "NetworkError",
    "QuotaExceededError",
    "UnsupportedCurrencyError",
]
