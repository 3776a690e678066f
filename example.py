from datetime import date

from fx_trend import FxTrend, ForexError

print(FxTrend.__version__)  # 0.1.0

# Default Usage (ExchangeRate-API, key passed on every call)
fx = FxTrend()
API_KEY = "your-exchangerate-api-key"

try:
    quote = fx.rate("USD", "EUR", API_KEY)
    print(quote)
    # => RateQuote(base='USD', target='EUR', value=0.92, retrieved_at=datetime(...))

    # Trailing 30 days, ascending, gaps left as gaps
    series = fx.history("USD", "EUR", API_KEY)
    print(series.as_mapping())
except ForexError as exc:
    print(f"{type(exc).__name__}: {exc}")

# Keyless provider with an explicit window end
frankfurter = FxTrend("frankfurter", timeout=10)
series = frankfurter.history("EUR", "SEK", days=14, as_of=date(2025, 11, 14))
print(series.to_frame().tail())
