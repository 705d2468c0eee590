"""yfinance quote source: the same daily bars through the yfinance library."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor

import pandas as pd
import yfinance as yf

from dropwatch.data.quote_source import QuoteSource
from dropwatch.errors import DecodeError, EmptyDataError, TransportError
from dropwatch.models import PriceSeries

logger = logging.getLogger(__name__)

OHLC_COLUMNS = ["open", "high", "low", "close"]


def frame_to_series(symbol: str, df: pd.DataFrame) -> PriceSeries:
    """Convert a yfinance history frame (DatetimeIndex, OHLC columns) to a PriceSeries."""
    if df.empty:
        raise EmptyDataError(symbol, "yfinance returned an empty history")

    df = df.rename(columns=str.lower)
    missing = [c for c in OHLC_COLUMNS if c not in df.columns]
    if missing:
        raise DecodeError(symbol, f"history is missing columns: {', '.join(missing)}")

    df = df[OHLC_COLUMNS].dropna().sort_index()
    if df.empty:
        raise EmptyDataError(symbol, "yfinance history has no complete bars")

    index = pd.to_datetime(df.index)
    if index.tz is None:
        index = index.tz_localize("UTC")
    else:
        index = index.tz_convert("UTC")

    series = PriceSeries(
        timestamps=tuple(ts.to_pydatetime() for ts in index),
        open=tuple(float(v) for v in df["open"]),
        high=tuple(float(v) for v in df["high"]),
        low=tuple(float(v) for v in df["low"]),
        close=tuple(float(v) for v in df["close"]),
    )
    if not series.finite:
        raise DecodeError(symbol, "history contains non-finite OHLC values")
    return series


class YFinanceClient(QuoteSource):
    """Synchronous yfinance wrapped for async usage via executor."""

    def __init__(self, max_workers: int = 4):
        self._executor = ThreadPoolExecutor(max_workers=max_workers)

    @property
    def name(self) -> str:
        return "yfinance"

    def _fetch_history(self, symbol: str, period: str, interval: str) -> pd.DataFrame:
        tk = yf.Ticker(symbol)
        return tk.history(period=period, interval=interval, auto_adjust=False)

    async def fetch(self, symbol: str, chart_range: str, interval: str) -> PriceSeries:
        loop = asyncio.get_running_loop()
        try:
            df = await loop.run_in_executor(
                self._executor,
                self._fetch_history,
                symbol,
                chart_range,
                interval,
            )
        except Exception as e:
            # yfinance surfaces network and lookup problems as assorted exception types
            raise TransportError(symbol, f"yfinance history failed: {e!r}") from e

        series = frame_to_series(symbol, df)
        logger.debug("%s: %d bars from yfinance", symbol, len(series))
        return series

    async def aclose(self) -> None:
        # Queued fetches are dropped, but a history() call already running in a
        # worker cannot be interrupted and still holds the interpreter at exit.
        self._executor.shutdown(wait=False, cancel_futures=True)
