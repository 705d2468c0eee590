"""Distance-from-high features — window highs, drop rates and the sell warning."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Mapping

from dropwatch.errors import InsufficientDataError
from dropwatch.models import DEFAULT_WINDOWS, InterestMeasure, Ticker, WindowKey

WARNING_RATIO = 0.9  # warn when price <= 90% of the longest-window high

_CENT = Decimal("0.01")
# Wide enough to quantize any finite float (max ~1.8e308) to 2 dp
_CONTEXT = Context(prec=400)


def round2(value: float) -> float:
    """Round to 2 dp, half away from zero, on the float's shortest repr.

    Non-finite values are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    return float(Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP, context=_CONTEXT))


def window_high(highs: tuple[float, ...], days: int) -> float | None:
    """Max high over the last ``days`` bars, shrinking to the full history.

    Returns None when the effective slice is empty.
    """
    size = min(days, len(highs))
    if size <= 0:
        return None
    return round2(max(highs[-size:]))


def drop_rate(price: float, high: float) -> float | None:
    if high <= 0:
        return None
    return round2((price - high) / high * 100)


def compute_measure(
    ticker: Ticker,
    windows: Mapping[WindowKey, int] = DEFAULT_WINDOWS,
    warning_ratio: float = WARNING_RATIO,
) -> InterestMeasure:
    """Compute the InterestMeasure for a populated ticker.

    Raises InsufficientDataError if the series has no bars.
    """
    series = ticker.series
    if series.empty:
        raise InsufficientDataError(ticker.symbol, "series has no bars, cannot determine current price")

    price = round2(series.close[-1])
    highs: dict[WindowKey, float] = {}
    drops: dict[WindowKey, float] = {}

    for key, days in windows.items():
        high = window_high(series.high, days)
        if high is None:
            continue
        highs[key] = high
        drop = drop_rate(price, high)
        if drop is not None:
            drops[key] = drop

    warning = False
    if windows:
        longest = max(windows, key=windows.__getitem__)
        longest_high = highs.get(longest)
        if longest_high is not None:
            warning = price <= warning_ratio * longest_high

    return InterestMeasure(
        symbol=ticker.symbol,
        current_price=price,
        window_highs=highs,
        drop_rates=drops,
        warning=warning,
    )
