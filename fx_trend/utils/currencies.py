"""Currency code helpers shared by the client and the front ends."""

from __future__ import annotations

import re

CURRENCY_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")

DEFAULT_BASE_CURRENCY = "USD"
DEFAULT_TARGET_CURRENCY = "EUR"

# Codes published by ExchangeRate-API, alphabetical.
SUPPORTED_CURRENCIES: tuple[str, ...] = (
    "AED", "AFN", "ALL", "AMD", "ANG", "AOA", "ARS", "AUD", "AWG", "AZN", "BAM", "BBD", "BDT",
    "BGN", "BHD", "BIF", "BMD", "BND", "BOB", "BRL", "BSD", "BTN", "BWP", "BYN", "BZD", "CAD",
    "CHF", "CLP", "CNY", "COP", "CRC", "CUP", "CVE", "CZK", "DJF", "DKK", "DOP", "DZD", "EGP",
    "ERN", "ETB", "EUR", "FJD", "FKP", "FOK", "GBP", "GEL", "GGP", "GHS", "GIP", "GMD", "GNF",
    "GTQ", "GYD", "HKD", "HNL", "HRK", "HTG", "HUF", "IDR", "ILS", "IMP", "INR", "IQD", "IRR",
    "ISK", "JEP", "JMD", "JOD", "JPY", "KES", "KGS", "KHR", "KID", "KMF", "KPW", "KRW", "KWD",
    "KYD", "KZT", "LAK", "LBP", "LKR", "LRD", "LSL", "LYD", "MAD", "MDL", "MGA", "MKD", "MMK",
    "MNT", "MOP", "MRU", "MUR", "MVR", "MWK", "MXN", "MYR", "MZN", "NAD", "NGN", "NIO", "NOK",
    "NPR", "NZD", "OMR", "PAB", "PEN", "PGK", "PHP", "PKR", "PLN", "PYG", "QAR", "RON", "RSD",
    "RUB", "RWF", "SAR", "SBD", "SCR", "SDG", "SEK", "SGD", "SHP", "SLL", "SOS", "SRD", "SSP",
    "STN", "SYP", "SZL", "THB", "TJS", "TMT", "TND", "TOP", "TRY", "TTD", "TVD", "TWD", "TZS",
    "UAH", "UGX", "USD", "UYU", "UZS", "VES", "VND", "VUV", "WST", "XAF", "XCD", "XDR", "XOF",
    "XPF", "YER", "ZAR", "ZMW", "ZWL",
)


def normalise_currency_code(code: str) -> str:
    """Return ``code`` stripped and upper-cased, or raise ``ValueError``.

    Only the syntax is checked; whether the provider knows the currency is
    decided by its response.
    """

    if not isinstance(code, str):
        raise ValueError(f"Currency code must be a string, got {type(code).__name__}")
    cleaned = code.strip().upper()
    if not CURRENCY_CODE_PATTERN.match(cleaned):
        raise ValueError(f"Invalid currency code: {code!r}")
    return cleaned


def is_supported(code: str) -> bool:
    """Return True when ``code`` is in :data:`SUPPORTED_CURRENCIES`."""

    try:
        return normalise_currency_code(code) in SUPPORTED_CURRENCIES
    except ValueError:
        return False


__all__ = [
    "CURRENCY_CODE_PATTERN",
    "DEFAULT_BASE_CURRENCY",
    "DEFAULT_TARGET_CURRENCY",
    "SUPPORTED_CURRENCIES",
    "is_supported",
    "normalise_currency_code",
]
