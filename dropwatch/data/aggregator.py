"""Partition per-symbol outcomes into a deterministic ResultSet."""

from __future__ import annotations

import logging
from typing import Iterable

from dropwatch.models import FetchOutcome, ResultSet

logger = logging.getLogger(__name__)


def aggregate(outcomes: Iterable[FetchOutcome]) -> ResultSet:
    """Split outcomes into measures and failures.

    Outcomes may arrive in any completion order; measures come back sorted by
    symbol ascending and failures in the same order for stable output.
    An all-failed run yields an empty measures list, not an error.
    """
    result = ResultSet()
    for outcome in outcomes:
        if outcome.ok:
            result.measures.append(outcome.measure)
            if outcome.ticker is not None:
                result.tickers[outcome.symbol] = outcome.ticker
        else:
            result.failures.append(outcome.failure)

    result.measures.sort(key=lambda m: m.symbol)
    result.failures.sort(key=lambda f: f.symbol)

    logger.info(
        "Aggregated %d outcomes: %d measured, %d failed",
        result.total_count, result.success_count, result.failed_count,
    )
    return result
