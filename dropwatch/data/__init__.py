"""Data layer — quote sources, the fetch coordinator and the result aggregator."""

from dropwatch.config import QuoteProvider
from dropwatch.data.aggregator import aggregate
from dropwatch.data.chart_client import ChartClient
from dropwatch.data.coordinator import FetchCoordinator, run_all
from dropwatch.data.quote_source import QuoteSource
from dropwatch.data.yfinance_client import YFinanceClient


def create_quote_source(provider: str, timeout: float = 30.0) -> QuoteSource:
    """Build the quote source named by ``provider`` (see QuoteProvider)."""
    if QuoteProvider(provider) is QuoteProvider.YFINANCE:
        return YFinanceClient()
    return ChartClient(timeout=timeout)


__all__ = [
    "ChartClient",
    "FetchCoordinator",
    "QuoteSource",
    "YFinanceClient",
    "aggregate",
    "create_quote_source",
    "run_all",
]
