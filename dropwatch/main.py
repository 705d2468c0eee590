"""Main entry point — fetch quotes, compute drop-from-high metrics, print the report."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from dropwatch.config import QuoteProvider, Settings, get_settings
from dropwatch.data import FetchCoordinator, create_quote_source
from dropwatch.models import DEFAULT_WINDOWS, ResultSet
from dropwatch.output.report import render_failures, render_report, render_series

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dropwatch",
        description="Report how far each symbol trades below its recent highs.",
    )
    parser.add_argument("--symbols", nargs="+", metavar="SYM",
                        help="Symbols to report on (default: configured list)")
    parser.add_argument("--range", dest="chart_range",
                        help="History range token, e.g. 6mo, 1y")
    parser.add_argument("--interval", help="Bar interval token, e.g. 1d")
    parser.add_argument("--provider", choices=[p.value for p in QuoteProvider],
                        help="Quote source to use")
    parser.add_argument("--show-series", action="store_true",
                        help="Also print every fetched bar per symbol")
    return parser


async def run_report(
    settings: Settings,
    symbols: list[str],
    chart_range: str,
    interval: str,
    provider: str,
) -> ResultSet:
    """Fetch and measure all symbols with one shared quote source."""
    source = create_quote_source(provider, timeout=settings.request_timeout)
    coordinator = FetchCoordinator(
        source,
        chart_range=chart_range,
        interval=interval,
        windows=DEFAULT_WINDOWS,
        warning_ratio=settings.warning_ratio,
        deadline=settings.run_deadline,
        max_concurrency=settings.max_concurrency,
    )
    try:
        return await coordinator.run_all(symbols)
    finally:
        await source.aclose()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    symbols = args.symbols or settings.symbols
    chart_range = args.chart_range or settings.chart_range
    interval = args.interval or settings.interval
    provider = args.provider or settings.quote_provider

    try:
        result = asyncio.run(run_report(settings, symbols, chart_range, interval, provider))
    except Exception as exc:
        logger.exception("Run aborted by an unexpected error: %s", exc)
        return 1

    if args.show_series:
        for measure in result.measures:
            ticker = result.tickers.get(measure.symbol)
            if ticker is not None:
                print(render_series(ticker))
                print()

    print(render_report(result.measures, DEFAULT_WINDOWS))

    if result.failures:
        print(render_failures(result.failures), file=sys.stderr)
    if not result.measures:
        logger.warning("No symbol could be measured (%d failed)", result.failed_count)

    return 0


if __name__ == "__main__":
    sys.exit(main())
