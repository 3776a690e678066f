"""Command line front end for fetching current and historical rates."""

from __future__ import annotations

import argparse
import getpass
import sys
from datetime import date
from pathlib import Path
from typing import Sequence

from fx_trend import FxTrend
from fx_trend.charts import quote_label, trend_line
from fx_trend.errors import ForexError
from fx_trend.ingestion.providers import Provider
from fx_trend.utils.currencies import DEFAULT_BASE_CURRENCY, DEFAULT_TARGET_CURRENCY, is_supported
from fx_trend.utils.date_range import MAX_HISTORY_DAYS
from fx_trend.utils.logger import configure_logging, get_logger

LOGGER = get_logger(__name__)

__all__ = ["build_parser", "parse_args", "main"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fx-trend", description=__doc__)
    parser.add_argument(
        "--provider",
        default=Provider.EXCHANGERATE_API.value,
        help="Rate provider (exchangerate-api or frankfurter)",
    )
    parser.add_argument(
        "--api-key",
        dest="api_key",
        help="Provider API key; prompted for when omitted and the provider needs one",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for fx_trend (defaults to $FX_TREND_LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    rate_parser = subparsers.add_parser("rate", help="Show the current rate for a pair")
    _add_pair_arguments(rate_parser)

    history_parser = subparsers.add_parser("history", help="Show the trailing daily rates for a pair")
    _add_pair_arguments(history_parser)
    history_parser.add_argument(
        "--days",
        type=int,
        default=MAX_HISTORY_DAYS,
        help=f"Number of trailing calendar days (1-{MAX_HISTORY_DAYS})",
    )
    history_parser.add_argument(
        "--as-of",
        dest="as_of",
        help="Last day of the window (YYYY-MM-DD); defaults to today",
    )
    history_parser.add_argument("--csv", dest="csv_path", help="Write the series to this CSV file")
    history_parser.add_argument(
        "--chart", dest="chart_path", help="Write an interactive HTML line chart to this file"
    )
    return parser


def _add_pair_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("base", nargs="?", default=DEFAULT_BASE_CURRENCY, help="Base currency code")
    parser.add_argument(
        "target", nargs="?", default=DEFAULT_TARGET_CURRENCY, help="Target currency code"
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _resolve_api_key(args: argparse.Namespace, fx: FxTrend) -> str:
    if args.api_key is not None:
        return args.api_key
    if not fx.config.requires_credential:
        return ""
    return getpass.getpass("API key: ")


def _run_rate(fx: FxTrend, args: argparse.Namespace, api_key: str) -> None:
    quote = fx.rate(args.base, args.target, api_key)
    print(quote_label(quote))
    print(f"Retrieved at {quote.retrieved_at.isoformat(timespec='seconds')}")


def _run_history(fx: FxTrend, args: argparse.Namespace, api_key: str) -> None:
    as_of = date.fromisoformat(args.as_of) if args.as_of else None
    series = fx.history(args.base, args.target, api_key, args.days, as_of=as_of)
    pair = f"{args.base.upper()}/{args.target.upper()}"
    for point in series:
        print(f"{point.rate_date.isoformat()}  {point.value}")
    print(f"{len(series)} observations for {pair} ({series.first.rate_date} to {series.last.rate_date})")
    if args.csv_path:
        series.to_frame().to_csv(Path(args.csv_path), index=False)
        LOGGER.info("Saved %s rows → %s", len(series), args.csv_path)
    if args.chart_path:
        trend_line(series, title=f"{pair} over {args.days} days").write_html(args.chart_path)
        LOGGER.info("Saved chart → %s", args.chart_path)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    if args.log_level:
        configure_logging(args.log_level)
    try:
        fx = FxTrend(args.provider, timeout=args.timeout)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    for code in (args.base, args.target):
        if not is_supported(code):
            LOGGER.warning("%s is not a known currency code; the provider may reject it", code)
    api_key = _resolve_api_key(args, fx)
    try:
        if args.command == "rate":
            _run_rate(fx, args, api_key)
        else:
            _run_history(fx, args, api_key)
    except (ForexError, ValueError) as exc:
        print(f"error: {type(exc).__name__}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
