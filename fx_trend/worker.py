"""Run rate fetches off the caller's thread and hand each result back once."""

from __future__ import annotations

import concurrent.futures
import threading
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Generic, TypeVar

from fx_trend.errors import ForexError
from fx_trend.ingestion.models import HistoricalSeries, RateQuote
from fx_trend.ingestion.normalizer import normalize
from fx_trend.ingestion.strategy import RateSource
from fx_trend.utils.date_range import MAX_HISTORY_DAYS
from fx_trend.utils.logger import get_logger

LOGGER = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FetchOutcome(Generic[T]):
    """Either the fetched value or the error the fetch ended with."""

    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


class FetchHandle(Generic[T]):
    """A pending fetch whose outcome is delivered exactly once.

    After :meth:`poll` or :meth:`result` hands the outcome over, the handle
    drops its future and further calls report nothing. A discarded handle
    never delivers.
    """

    def __init__(self, future: concurrent.futures.Future, label: str) -> None:
        self.label = label
        self._future: concurrent.futures.Future | None = future
        self._lock = threading.Lock()
        self._discarded = False

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._future is not None and not self._future.done()

    @property
    def discarded(self) -> bool:
        return self._discarded

    @property
    def delivered(self) -> bool:
        with self._lock:
            return self._future is None and not self._discarded

    def poll(self) -> FetchOutcome[T] | None:
        """Return the outcome if the fetch finished and was not yet delivered."""

        with self._lock:
            if self._future is None or not self._future.done():
                return None
            return self._take()

    def result(self, timeout: float | None = None) -> T:
        """Block until the fetch finishes and return its value or raise its error."""

        with self._lock:
            future = self._future
        if future is None:
            raise RuntimeError(f"{self.label} result was already delivered or discarded")
        concurrent.futures.wait([future], timeout=timeout)
        if not future.done():
            raise TimeoutError(f"{self.label} did not finish within {timeout}s")
        with self._lock:
            if self._future is None:
                raise RuntimeError(f"{self.label} result was already delivered or discarded")
            outcome = self._take()
        return outcome.unwrap()

    def discard(self) -> None:
        """Cancel the fetch, or drop its result when it arrives."""

        with self._lock:
            if self._future is None:
                return
            if not self._future.cancel():
                LOGGER.debug("%s already running; its result will be dropped", self.label)
            self._future = None
            self._discarded = True

    def _take(self) -> FetchOutcome[T]:
        future = self._future
        assert future is not None
        self._future = None
        error = future.exception()
        if error is not None:
            return FetchOutcome(error=error)
        return FetchOutcome(value=future.result())


class FetchWorker:
    """Submit current-rate and history fetches to a small thread pool."""

    def __init__(self, source: RateSource, *, max_workers: int = 1) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.source = source
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="fx-trend"
        )
        self._handles: list[FetchHandle[Any]] = []
        self._closed = False

    def submit_current(self, base: str, target: str, credential: str) -> FetchHandle[RateQuote]:
        return self._submit(
            f"latest {base}/{target}",
            self.source.fetch_current,
            base,
            target,
            credential,
        )

    def submit_history(
        self,
        base: str,
        target: str,
        credential: str,
        days: int = MAX_HISTORY_DAYS,
        *,
        as_of: date | None = None,
    ) -> FetchHandle[HistoricalSeries]:
        def _fetch_series() -> HistoricalSeries:
            raw = self.source.fetch_historical(base, target, credential, days, as_of=as_of)
            return normalize(raw)

        return self._submit(f"history {base}/{target}", _fetch_series)

    def shutdown(self) -> None:
        """Discard every outstanding fetch and stop the pool without waiting."""

        if self._closed:
            return
        self._closed = True
        for handle in self._handles:
            handle.discard()
        self._handles.clear()
        self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "FetchWorker":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()

    def _submit(self, label: str, fn: Callable[..., T], *args: Any) -> FetchHandle[T]:
        if self._closed:
            raise RuntimeError("FetchWorker has been shut down")
        future = self._executor.submit(_logged_call, label, fn, *args)
        handle: FetchHandle[T] = FetchHandle(future, label)
        self._handles = [h for h in self._handles if not (h.delivered or h.discarded)]
        self._handles.append(handle)
        return handle


def _logged_call(label: str, fn: Callable[..., T], *args: Any) -> T:
    try:
        return fn(*args)
    except ForexError as exc:
        LOGGER.warning("%s failed: %s", label, exc)
        raise


__all__ = ["FetchHandle", "FetchOutcome", "FetchWorker"]
