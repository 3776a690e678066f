# app.py: Forex rate fetcher (streamlit run fx_trend/app.py)
import time

import streamlit as st

from fx_trend import FxTrend
from fx_trend.charts import trend_line
from fx_trend.ingestion.providers import Provider
from fx_trend.utils.currencies import (
    DEFAULT_BASE_CURRENCY,
    DEFAULT_TARGET_CURRENCY,
    SUPPORTED_CURRENCIES,
)
from fx_trend.utils.date_range import MAX_HISTORY_DAYS
from fx_trend.worker import FetchWorker

POLL_SECONDS = 0.3

st.set_page_config(page_title="Forex Rate Fetcher", layout="centered")
st.title("💱 Forex Rate Fetcher")


@st.cache_resource(show_spinner=False)
def shared_worker(provider: str) -> FetchWorker:
    # One pool per provider for the whole server process; sessions only hold handles.
    return FetchWorker(FxTrend(provider).client, max_workers=4)


# ========================= Init state =========================
for key in ("quote", "series", "rate_error", "history_error", "rate_job", "history_job"):
    st.session_state.setdefault(key, None)

provider = st.sidebar.selectbox("Provider", [p.value for p in Provider], index=0)

if st.session_state.get("provider") != provider:
    # Results still in flight for the previous provider are dropped.
    for job_key in ("rate_job", "history_job"):
        job = st.session_state[job_key]
        if job is not None:
            job[1].discard()
            st.session_state[job_key] = None
    st.session_state.provider = provider

worker = shared_worker(provider)
config = worker.source.config

# ========================= Inputs =========================
api_key = st.text_input(
    "API Key",
    type="password",
    disabled=not config.requires_credential,
    help="Kept in this browser session only.",
)

c1, c2 = st.columns(2)
with c1:
    base = st.selectbox("Base Currency", SUPPORTED_CURRENCIES, index=SUPPORTED_CURRENCIES.index(DEFAULT_BASE_CURRENCY))
with c2:
    target = st.selectbox(
        "Target Currency", SUPPORTED_CURRENCIES, index=SUPPORTED_CURRENCIES.index(DEFAULT_TARGET_CURRENCY)
    )


def collect(job_key: str, value_key: str, error_key: str, *, with_pair: bool = False) -> bool:
    """Store a finished job's outcome; return True while it is still running."""

    job = st.session_state[job_key]
    if job is None:
        return False
    pair, handle = job
    outcome = handle.poll()
    if outcome is None:
        if handle.pending:
            return True
        st.session_state[job_key] = None
        return False
    st.session_state[job_key] = None
    if outcome.ok:
        st.session_state[value_key] = (pair, outcome.value) if with_pair else outcome.value
        st.session_state[error_key] = None
    else:
        st.session_state[error_key] = f"{type(outcome.error).__name__}: {outcome.error}"
    return False


# ========================= Current rate =========================
if st.button("Fetch Rate", disabled=st.session_state.rate_job is not None):
    st.session_state.rate_job = (f"{base}/{target}", worker.submit_current(base, target, api_key))

rate_running = collect("rate_job", "quote", "rate_error")
if rate_running:
    st.info(f"Fetching {st.session_state.rate_job[0]}…")

if st.session_state.rate_error:
    st.error(st.session_state.rate_error)

quote = st.session_state.quote
st.metric(quote.pair if quote else f"{base}/{target}", f"{quote.value:.4f}" if quote else "Not fetched")
if quote:
    st.caption(f"Retrieved at {quote.retrieved_at:%Y-%m-%d %H:%M:%S} UTC")

st.divider()

# ========================= Historical rates =========================
if st.button("Fetch Historical Rates", disabled=st.session_state.history_job is not None):
    st.session_state.history_job = (
        f"{base}/{target}",
        worker.submit_history(base, target, api_key, MAX_HISTORY_DAYS),
    )

history_running = collect("history_job", "series", "history_error", with_pair=True)
if history_running:
    st.info(f"Fetching {MAX_HISTORY_DAYS} days of {st.session_state.history_job[0]}…")

if st.session_state.history_error:
    st.error(st.session_state.history_error)

if st.session_state.series:
    pair, series = st.session_state.series
    st.plotly_chart(trend_line(series, title=f"{pair} • last {MAX_HISTORY_DAYS} days"), use_container_width=True)
    st.caption(f"{len(series)} observations; days without a published rate are not filled in.")

if rate_running or history_running:
    time.sleep(POLL_SECONDS)
    st.rerun()
