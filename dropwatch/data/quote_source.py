"""Uniform quote-source interface.

Every provider returns a PriceSeries or raises one of the QuoteSourceError
subclasses, so the coordinator can treat providers interchangeably.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from dropwatch.models import PriceSeries


class QuoteSource(ABC):
    """Abstract base for historical daily price providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in logging."""
        ...

    @abstractmethod
    async def fetch(self, symbol: str, chart_range: str, interval: str) -> PriceSeries:
        """Fetch the bars for ``symbol`` over ``chart_range`` at ``interval``.

        Raises:
            TransportError: the network exchange failed.
            DecodeError: the payload is not a valid price series.
            EmptyDataError: the payload decoded but holds zero bars.
        """
        ...

    async def aclose(self) -> None:
        """Release provider resources. Default: nothing to release."""
