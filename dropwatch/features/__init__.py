"""Per-ticker drawdown features."""

from dropwatch.features.drawdown import WARNING_RATIO, compute_measure, round2

__all__ = [
    "WARNING_RATIO",
    "compute_measure",
    "round2",
]
