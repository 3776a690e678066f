"""Plotly figures for rate quotes and historical series."""

from __future__ import annotations

import plotly.express as px
import plotly.graph_objects as go

from fx_trend.ingestion.models import HistoricalSeries, RateQuote


def quote_label(quote: RateQuote | None, *, precision: int = 4) -> str:
    if quote is None:
        return "Rate: Not fetched"
    return f"Rate: {quote.value:.{precision}f} {quote.pair}"


def trend_line(series: HistoricalSeries, title: str) -> go.Figure:
    """Line chart of ``series`` with one marker per observed day.

    Missing days are left as gaps on the date axis rather than interpolated
    points.
    """

    fig = px.line(series.to_frame(), x="date", y="rate", title=title, markers=True)
    fig.update_layout(xaxis_title="Date", yaxis_title="Rate")
    return fig


__all__ = ["quote_label", "trend_line"]
