"""Fetch coordinator — one concurrent fetch+measure task per symbol.

Each task owns its Ticker and InterestMeasure until it returns its outcome.
Known per-symbol errors become failed outcomes at the task boundary, so one
slow or broken symbol never fails the others. Anything else propagates and
aborts the run.

Optional knobs:
  - ``deadline``: seconds for the whole run; tasks still running when it
    passes become transport failures while finished results are kept
  - ``max_concurrency``: semaphore cap on in-flight fetches
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Iterable, Mapping

from dropwatch.data.aggregator import aggregate
from dropwatch.data.quote_source import QuoteSource
from dropwatch.errors import (
    DecodeError,
    DropwatchError,
    EmptyDataError,
    FailureKind,
    TransportError,
)
from dropwatch.features.drawdown import WARNING_RATIO, compute_measure
from dropwatch.models import DEFAULT_WINDOWS, FetchOutcome, ResultSet, Ticker, WindowKey

logger = logging.getLogger(__name__)


class FetchCoordinator:
    """Dispatches one task per symbol and fans the outcomes into a ResultSet."""

    def __init__(
        self,
        source: QuoteSource,
        chart_range: str = "6mo",
        interval: str = "1d",
        windows: Mapping[WindowKey, int] = DEFAULT_WINDOWS,
        warning_ratio: float = WARNING_RATIO,
        deadline: float | None = None,
        max_concurrency: int | None = None,
    ):
        self.source = source
        self.chart_range = chart_range
        self.interval = interval
        self.windows = dict(windows)
        self.warning_ratio = warning_ratio
        self.deadline = deadline
        self.max_concurrency = max_concurrency

    async def run_all(self, symbols: Iterable[str]) -> ResultSet:
        """Fetch and measure every symbol, then aggregate once all tasks finish."""
        outcomes = await self.collect(symbols)
        return aggregate(outcomes)

    async def collect(self, symbols: Iterable[str]) -> list[FetchOutcome]:
        """Run all per-symbol tasks and return their outcomes, unsorted."""
        symbols = list(symbols)
        unique = list(dict.fromkeys(symbols))
        if len(unique) < len(symbols):
            dupes = sorted({s for s in symbols if symbols.count(s) > 1})
            logger.warning(
                "Fetching %d of %d symbols, duplicates ignored: %s",
                len(unique), len(symbols), ", ".join(dupes),
            )
        if not unique:
            logger.info("No symbols to fetch")
            return []

        loop = asyncio.get_running_loop()
        deadline_at = loop.time() + self.deadline if self.deadline is not None else None
        semaphore = (
            asyncio.Semaphore(self.max_concurrency)
            if self.max_concurrency
            else None
        )

        logger.info(
            "Fetching %d symbols via %s (range=%s, interval=%s)",
            len(unique), self.source.name, self.chart_range, self.interval,
        )
        start = time.monotonic()

        tasks = [self._run_one(symbol, semaphore, deadline_at) for symbol in unique]
        outcomes = await asyncio.gather(*tasks)

        ok = sum(1 for o in outcomes if o.ok)
        logger.info(
            "Fetch complete: %d/%d symbols measured in %.2fs",
            ok, len(unique), time.monotonic() - start,
        )
        return list(outcomes)

    async def _run_one(
        self,
        symbol: str,
        semaphore: asyncio.Semaphore | None,
        deadline_at: float | None,
    ) -> FetchOutcome:
        work = self._fetch_and_measure(symbol, semaphore)
        try:
            if deadline_at is None:
                return await work
            remaining = max(0.0, deadline_at - asyncio.get_running_loop().time())
            return await asyncio.wait_for(work, timeout=remaining)
        except asyncio.TimeoutError:
            logger.warning("Fetch for %s exceeded the %.1fs run deadline", symbol, self.deadline)
            return FetchOutcome.failed(
                symbol, FailureKind.TRANSPORT, f"timed out: run deadline of {self.deadline}s exceeded",
            )
        except DropwatchError as e:
            logger.warning("Fetch failed for %s (%s): %s", symbol, e.kind.value, e.message)
            return FetchOutcome.failed(symbol, e.kind, e.message)

    async def _fetch_and_measure(
        self, symbol: str, semaphore: asyncio.Semaphore | None,
    ) -> FetchOutcome:
        async with semaphore or contextlib.nullcontext():
            try:
                series = await self.source.fetch(symbol, self.chart_range, self.interval)
            except TimeoutError as e:
                # Keep a source's own timeout apart from the run deadline
                raise TransportError(symbol, f"{self.source.name} timed out: {e!r}") from e

        if series.empty:
            raise EmptyDataError(symbol, f"{self.source.name} returned zero bars")
        if not series.finite:
            raise DecodeError(symbol, f"{self.source.name} returned non-finite OHLC values")

        ticker = Ticker(symbol)
        ticker.populate(series)
        measure = compute_measure(ticker, self.windows, self.warning_ratio)
        return FetchOutcome.success(measure, ticker)


async def run_all(
    symbols: Iterable[str],
    source: QuoteSource,
    **kwargs,
) -> ResultSet:
    """Convenience wrapper: build a FetchCoordinator and run it once."""
    return await FetchCoordinator(source, **kwargs).run_all(symbols)
