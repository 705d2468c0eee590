"""Domain types shared by the quote sources, the calculator and the reporter."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from dropwatch.errors import FailureKind


class WindowKey(str, Enum):
    """Trailing lookback windows, declared in report column order."""

    LAST_05D = "05d"
    LAST_10D = "10d"
    LAST_30D = "30d"
    LAST_6MO = "6mo"


# Ordered: report columns follow this declaration order.
DEFAULT_WINDOWS: dict[WindowKey, int] = {
    WindowKey.LAST_05D: 5,
    WindowKey.LAST_10D: 10,
    WindowKey.LAST_30D: 30,
    WindowKey.LAST_6MO: 180,
}


@dataclass(frozen=True)
class PriceSeries:
    """Daily bars, oldest first, one entry per bar in every field."""

    timestamps: tuple[datetime, ...] = ()
    open: tuple[float, ...] = ()
    high: tuple[float, ...] = ()
    low: tuple[float, ...] = ()
    close: tuple[float, ...] = ()

    def __post_init__(self) -> None:
        lengths = {
            len(self.timestamps), len(self.open), len(self.high),
            len(self.low), len(self.close),
        }
        if len(lengths) != 1:
            raise ValueError(f"PriceSeries fields are misaligned: lengths {sorted(lengths)}")
        if any(later < earlier for earlier, later in zip(self.timestamps, self.timestamps[1:])):
            raise ValueError("PriceSeries timestamps must run oldest to newest")

    def __len__(self) -> int:
        return len(self.timestamps)

    @property
    def empty(self) -> bool:
        return len(self) == 0

    @property
    def finite(self) -> bool:
        """True when every OHLC value is a finite number."""
        return all(
            math.isfinite(v)
            for values in (self.open, self.high, self.low, self.close)
            for v in values
        )


class Ticker:
    """A symbol bound to the series fetched for it.

    Starts empty and is populated exactly once; afterwards it is read-only.
    """

    def __init__(self, symbol: str):
        self.symbol = symbol
        self._series: PriceSeries | None = None

    @property
    def populated(self) -> bool:
        return self._series is not None

    @property
    def series(self) -> PriceSeries:
        if self._series is None:
            raise RuntimeError(f"Ticker {self.symbol} has not been populated")
        return self._series

    def populate(self, series: PriceSeries) -> None:
        if self._series is not None:
            raise RuntimeError(f"Ticker {self.symbol} is already populated")
        self._series = series

    def __repr__(self) -> str:
        bars = len(self._series) if self._series is not None else None
        return f"Ticker(symbol={self.symbol!r}, bars={bars})"


@dataclass(frozen=True)
class InterestMeasure:
    """Read-only snapshot; the window mappings are wrapped in MappingProxyType."""

    symbol: str
    current_price: float
    window_highs: Mapping[WindowKey, float] = field(default_factory=dict)
    drop_rates: Mapping[WindowKey, float] = field(default_factory=dict)
    warning: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "window_highs", MappingProxyType(dict(self.window_highs)))
        object.__setattr__(self, "drop_rates", MappingProxyType(dict(self.drop_rates)))


@dataclass(frozen=True)
class FetchFailure:
    symbol: str
    kind: FailureKind
    reason: str

    def __str__(self) -> str:
        return f"{self.symbol}: {self.kind.value} error: {self.reason}"


@dataclass(frozen=True)
class FetchOutcome:
    """Per-symbol result: exactly one of ``measure`` / ``failure`` is set."""

    symbol: str
    measure: InterestMeasure | None = None
    failure: FetchFailure | None = None
    ticker: Ticker | None = None

    def __post_init__(self) -> None:
        if (self.measure is None) == (self.failure is None):
            raise ValueError(
                f"FetchOutcome for {self.symbol} must carry exactly one of measure or failure"
            )

    @property
    def ok(self) -> bool:
        return self.measure is not None

    @classmethod
    def success(cls, measure: InterestMeasure, ticker: Ticker | None = None) -> FetchOutcome:
        return cls(symbol=measure.symbol, measure=measure, ticker=ticker)

    @classmethod
    def failed(cls, symbol: str, kind: FailureKind, reason: str) -> FetchOutcome:
        return cls(symbol=symbol, failure=FetchFailure(symbol=symbol, kind=kind, reason=reason))


@dataclass
class ResultSet:
    """Aggregated run output: measures sorted by symbol plus failures."""

    measures: list[InterestMeasure] = field(default_factory=list)
    failures: list[FetchFailure] = field(default_factory=list)
    tickers: dict[str, Ticker] = field(default_factory=dict)

    @property
    def success_count(self) -> int:
        return len(self.measures)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def total_count(self) -> int:
        return self.success_count + self.failed_count
