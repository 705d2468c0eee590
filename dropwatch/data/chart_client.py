"""Yahoo Finance v8 chart client — daily OHLC bars over plain HTTP."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from dropwatch.data.quote_source import QuoteSource
from dropwatch.errors import DecodeError, EmptyDataError, TransportError
from dropwatch.models import PriceSeries

logger = logging.getLogger(__name__)

BASE_URL = "https://query1.finance.yahoo.com/v8/finance/chart"
USER_AGENT = "Mozilla/5.0"  # the endpoint rejects requests without a browser UA


# ── Wire models ────────────────────────────────────────────────────────────

class _Quote(BaseModel):
    # Response.json() accepts Infinity/NaN literals; reject them as decode errors
    model_config = ConfigDict(allow_inf_nan=False)

    open: list[float | None] = []
    high: list[float | None] = []
    low: list[float | None] = []
    close: list[float | None] = []
    volume: list[float | None] = []


class _Indicators(BaseModel):
    quote: list[_Quote] = []


class _ChartResult(BaseModel):
    timestamp: list[int] = []
    indicators: _Indicators


class _ChartError(BaseModel):
    code: str | None = None
    description: str | None = None


class _Chart(BaseModel):
    result: list[_ChartResult] | None = None
    error: _ChartError | None = None


class ChartResponse(BaseModel):
    chart: _Chart


def _error_description(resp: httpx.Response) -> str:
    """Best-effort extraction of Yahoo's chart.error.description."""
    try:
        payload = ChartResponse.model_validate(resp.json())
    except (ValueError, ValidationError):
        return (resp.text or "").strip()[:240]
    if payload.chart.error and payload.chart.error.description:
        return payload.chart.error.description
    return ""


def parse_chart(symbol: str, payload: dict) -> PriceSeries:
    """Convert a decoded chart payload into a PriceSeries, oldest bar first.

    Bars where any OHLC field is null are dropped so the fields stay aligned.
    Non-finite values fail validation and raise DecodeError.
    """
    try:
        chart = ChartResponse.model_validate(payload).chart
    except ValidationError as e:
        raise DecodeError(symbol, f"unexpected chart payload: {e.error_count()} validation error(s)") from e

    if not chart.result:
        detail = chart.error.description if chart.error and chart.error.description else "no result"
        raise EmptyDataError(symbol, f"chart returned no data ({detail})")

    data = chart.result[0]
    if not data.indicators.quote:
        raise EmptyDataError(symbol, "chart result has no quote indicators")
    quote = data.indicators.quote[0]

    n = len(data.timestamp)
    fields = (quote.open, quote.high, quote.low, quote.close)
    if any(len(values) != n for values in fields):
        raise DecodeError(
            symbol,
            f"misaligned chart arrays: {n} timestamps vs "
            f"{[len(values) for values in fields]} open/high/low/close",
        )

    rows = [
        (datetime.fromtimestamp(ts, tz=timezone.utc), o, h, lo, c)
        for ts, o, h, lo, c in zip(data.timestamp, *fields)
        if None not in (o, h, lo, c)
    ]
    if n and len(rows) < n:
        logger.debug("%s: dropped %d bar(s) with null OHLC values", symbol, n - len(rows))
    if not rows:
        raise EmptyDataError(symbol, "chart returned zero usable bars")

    rows.sort(key=lambda row: row[0])
    timestamps, opens, highs, lows, closes = zip(*rows)
    return PriceSeries(
        timestamps=timestamps, open=opens, high=highs, low=lows, close=closes,
    )


class ChartClient(QuoteSource):
    """Fetches daily bars from the chart endpoint with one shared AsyncClient.

    The client is created lazily and shared read-only by every concurrent fetch.
    """

    def __init__(self, timeout: float = 30.0, client: httpx.AsyncClient | None = None):
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def name(self) -> str:
        return "chart"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": USER_AGENT},
            )
        return self._client

    async def fetch(self, symbol: str, chart_range: str, interval: str) -> PriceSeries:
        url = f"{BASE_URL}/{symbol}"
        params = {"range": chart_range, "interval": interval}
        logger.debug("GET %s %s", url, params)

        try:
            resp = await self._get_client().get(url, params=params)
        except httpx.HTTPError as e:
            raise TransportError(symbol, f"request failed: {e!r}") from e

        if resp.status_code >= 400:
            detail = _error_description(resp)
            message = f"HTTP {resp.status_code}" + (f": {detail}" if detail else "")
            raise TransportError(symbol, message)

        try:
            payload = resp.json()
        except ValueError as e:
            raise DecodeError(symbol, f"response is not JSON: {e}") from e

        series = parse_chart(symbol, payload)
        logger.debug("%s: %d bars from chart endpoint", symbol, len(series))
        return series

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
