"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from dropwatch.data.quote_source import QuoteSource
from dropwatch.models import PriceSeries, Ticker


def build_series(highs: list[float], closes: list[float] | None = None) -> PriceSeries:
    """Daily series from highs (and closes, defaulting to the highs)."""
    closes = closes if closes is not None else list(highs)
    assert len(closes) == len(highs)
    start = datetime(2025, 1, 2, tzinfo=timezone.utc)
    n = len(highs)
    return PriceSeries(
        timestamps=tuple(start + timedelta(days=i) for i in range(n)),
        open=tuple(closes),
        high=tuple(float(h) for h in highs),
        low=tuple(min(h, c) for h, c in zip(highs, closes)),
        close=tuple(float(c) for c in closes),
    )


class FakeQuoteSource(QuoteSource):
    """In-memory quote source.

    ``responses`` maps symbol -> PriceSeries or an exception instance to raise.
    ``delays`` maps symbol -> seconds to sleep before answering.
    """

    def __init__(self, responses: dict, delays: dict | None = None):
        self.responses = responses
        self.delays = delays or {}
        self.calls: list[tuple[str, str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    @property
    def name(self) -> str:
        return "fake"

    async def fetch(self, symbol: str, chart_range: str, interval: str) -> PriceSeries:
        self.calls.append((symbol, chart_range, interval))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(symbol, 0.01))
            response = self.responses[symbol]
            if isinstance(response, Exception):
                raise response
            return response
        finally:
            self.in_flight -= 1

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def make_series():
    return build_series


@pytest.fixture
def make_ticker():
    def _make(symbol: str, highs: list[float], closes: list[float] | None = None) -> Ticker:
        ticker = Ticker(symbol)
        ticker.populate(build_series(highs, closes))
        return ticker
    return _make


@pytest.fixture
def fake_source():
    return FakeQuoteSource


@pytest.fixture
def sample_series() -> PriceSeries:
    """130 bars trending up to a 6-month high of 150, then sliding to 120."""
    highs = [100.0 + i * 0.5 for i in range(100)] + [150.0 - i for i in range(30)]
    closes = [h - 1.0 for h in highs]
    return build_series(highs, closes)


@pytest.fixture
def chart_payload() -> dict:
    """Three-bar chart response; the middle bar has null values."""
    return {
        "chart": {
            "result": [{
                "meta": {"symbol": "FSF.NZ", "currency": "NZD"},
                "timestamp": [1735776000, 1735862400, 1735948800],
                "indicators": {
                    "quote": [{
                        "open": [2.50, None, 2.55],
                        "high": [2.60, None, 2.70],
                        "low": [2.45, None, 2.50],
                        "close": [2.58, None, 2.66],
                        "volume": [120000, None, 98000],
                    }],
                    "adjclose": [{"adjclose": [2.58, None, 2.66]}],
                },
            }],
            "error": None,
        }
    }
