"""Plain-text report — one header row, one row per measured symbol."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from dropwatch.features.drawdown import round2
from dropwatch.models import (
    DEFAULT_WINDOWS,
    FetchFailure,
    InterestMeasure,
    Ticker,
    WindowKey,
)

NAME_WIDTH = 6
CELL_WIDTH = 7
MISSING = "-"


def column_labels(windows: Iterable[WindowKey] = DEFAULT_WINDOWS) -> list[str]:
    """Header labels: NAME, Price, last/drop pair per window, sell?."""
    labels = ["NAME", "Price"]
    for key in windows:
        labels += [f"last{key.value}", f"drop{key.value}"]
    labels.append("sell?")
    return labels


def _fmt(value: float | bool | None) -> str:
    if value is None:
        return MISSING
    if isinstance(value, bool):
        return str(value).lower()
    return f"{value:.2f}"


def _row(cells: Sequence[str], name_width: int) -> str:
    name, *rest = cells
    return "|" + "|".join([f"{name:>{name_width}}", *(f"{c:>{CELL_WIDTH}}" for c in rest)]) + "|"


def render_report(
    measures: Sequence[InterestMeasure],
    windows: Mapping[WindowKey, int] = DEFAULT_WINDOWS,
) -> str:
    """Render measures as a pipe-delimited table, in the order given."""
    name_width = max([NAME_WIDTH, *(len(m.symbol) for m in measures)])
    lines = [_row(column_labels(windows), name_width)]
    for m in measures:
        cells = [m.symbol, _fmt(m.current_price)]
        for key in windows:
            cells += [_fmt(m.window_highs.get(key)), _fmt(m.drop_rates.get(key))]
        cells.append(_fmt(m.warning))
        lines.append(_row(cells, name_width))
    return "\n".join(lines)


def render_failures(failures: Sequence[FetchFailure]) -> str:
    if not failures:
        return ""
    lines = [f"{len(failures)} symbol(s) failed:"]
    lines += [f"  {failure}" for failure in failures]
    return "\n".join(lines)


def render_series(ticker: Ticker) -> str:
    """Per-bar dump of a fetched ticker: date and OHLC rounded to 2 dp."""
    series = ticker.series
    lines = [ticker.symbol, "=" * 32]
    for i, ts in enumerate(series.timestamps):
        lines.append(
            f"Date: {ts:%Y-%m-%d}, "
            f"Open: {round2(series.open[i]):.2f}, High: {round2(series.high[i]):.2f}, "
            f"Low: {round2(series.low[i]):.2f}, Close: {round2(series.close[i]):.2f}"
        )
    return "\n".join(lines)
