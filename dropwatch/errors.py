"""Error taxonomy for quote fetching and drawdown computation.

Every error here is recoverable at the per-symbol task boundary: the fetch
coordinator converts it into a failed FetchOutcome instead of aborting the run.
"""

from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    TRANSPORT = "transport"
    DECODE = "decode"
    EMPTY_DATA = "empty_data"
    INSUFFICIENT_DATA = "insufficient_data"


class DropwatchError(Exception):
    """Base for all recoverable per-symbol errors."""

    kind: FailureKind

    def __init__(self, symbol: str, message: str):
        self.symbol = symbol
        self.message = message
        super().__init__(f"{symbol}: {message}")


class QuoteSourceError(DropwatchError):
    """Raised by a quote source when it cannot deliver a price series."""


class TransportError(QuoteSourceError):
    """The network exchange failed (connectivity, HTTP status, timeout)."""

    kind = FailureKind.TRANSPORT


class DecodeError(QuoteSourceError):
    """The response could not be interpreted as a price series."""

    kind = FailureKind.DECODE


class EmptyDataError(QuoteSourceError):
    """The response decoded fine but held zero bars."""

    kind = FailureKind.EMPTY_DATA


class InsufficientDataError(DropwatchError):
    """Raised by the metric calculator when no current price can be derived."""

    kind = FailureKind.INSUFFICIENT_DATA
