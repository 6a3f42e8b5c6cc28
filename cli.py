#!/usr/bin/env python3
"""
Main CLI for the market calendar.
Usage: python cli.py calendar SYMBOL [options]
"""

import os
import sys
import json
import math
import logging
import argparse
from datetime import date, datetime
from typing import Dict, Any

from pipeline.calendar_dag import (
    run_calendar,
    describe_day,
    CalendarConfig,
    TIME_FRAMES,
    DATA_SOURCES
)
from analysis.calendar_builder import calendar_to_frame, VIEW_MODES
from ingestion.providers.binance_adapter import (
    fetch_available_symbols,
    fetch_ticker_24hr,
    fetch_order_book,
    BinanceError
)
from ingestion.transforms.normalizers import normalize_ticker, normalize_order_book, NormalizationError
from reports.formatters import (
    format_percentage,
    format_price,
    format_volume,
    format_date_display,
    format_period_range
)

PRICE_COLUMNS = ('open', 'high', 'low', 'close')
VOLUME_COLUMNS = ('volume', 'liquidity')
PERCENT_COLUMNS = ('volatility', 'performance')


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    if args.command == 'calendar':
        return show_calendar(args)
    if args.command == 'metrics':
        return show_metrics(args)
    if args.command == 'symbols':
        return show_symbols(args)
    if args.command == 'ticker':
        return show_ticker(args)

    parser.print_help()
    return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Daily market data on a calendar grid',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py calendar BTCUSDT
  python cli.py calendar ETHUSDT --time-frame weekly --year 2025 --month 3
  python cli.py calendar BTCUSDT --time-frame monthly --source synthetic --json
  python cli.py metrics BTCUSDT 2025-03-14
  python cli.py symbols
  python cli.py ticker ETHUSDT
        """
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Log pipeline progress')

    subparsers = parser.add_subparsers(dest='command')

    calendar_parser = subparsers.add_parser('calendar', help='Show calendar cells for a symbol')
    _add_pipeline_arguments(calendar_parser)
    calendar_parser.add_argument('--view',
                                 choices=VIEW_MODES,
                                 default='all',
                                 help='Metrics to display (default: all)')
    calendar_parser.add_argument('--json',
                                 action='store_true',
                                 help='Print raw JSON instead of a table')

    metrics_parser = subparsers.add_parser('metrics', help='Show detail metrics for one day')
    _add_pipeline_arguments(metrics_parser)
    metrics_parser.add_argument('date',
                                type=date.fromisoformat,
                                help='Calendar date (YYYY-MM-DD)')
    metrics_parser.add_argument('--json',
                                action='store_true',
                                help='Print raw JSON instead of text')

    subparsers.add_parser('symbols', help='List tradable USDT symbols')

    ticker_parser = subparsers.add_parser('ticker', help='Show 24h ticker and top of book')
    ticker_parser.add_argument('symbol', help='Trading pair (e.g., BTCUSDT)')

    return parser


def _add_pipeline_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('symbol',
                        nargs='?',
                        default=os.getenv('CALENDAR_DEFAULT_SYMBOL', 'BTCUSDT'),
                        help='Trading pair (default: CALENDAR_DEFAULT_SYMBOL or BTCUSDT)')
    parser.add_argument('--time-frame',
                        choices=TIME_FRAMES,
                        default='daily',
                        help='Calendar granularity (default: daily)')
    parser.add_argument('--year', type=int, help='Calendar year (default: current)')
    parser.add_argument('--month',
                        type=int,
                        choices=range(1, 13),
                        metavar='1-12',
                        help='Calendar month, 1 = January (default: current)')
    parser.add_argument('--days', type=int, help='Days of history to fetch (default: 90)')
    parser.add_argument('--source',
                        choices=DATA_SOURCES,
                        default='auto',
                        help='Data source; auto falls back to synthetic data (default: auto)')


def _config_from_args(args: argparse.Namespace, view_mode: str = 'all') -> CalendarConfig:
    """Build pipeline config; the CLI month is 1-based, the engine's is 0-based."""
    return CalendarConfig(
        symbol=args.symbol,
        time_frame=args.time_frame,
        year=args.year,
        month=args.month - 1 if args.month is not None else None,
        days=args.days,
        source=args.source,
        view_mode=view_mode
    )


def show_calendar(args: argparse.Namespace) -> int:
    """Run the pipeline and print the calendar."""
    try:
        config = _config_from_args(args, view_mode=args.view)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    result = run_calendar(config)

    if result['status'] != 'completed':
        print(f"ERROR: Failed to load data for {config.symbol}: {result['error_message']}", file=sys.stderr)
        return 1

    if args.json:
        print(_to_json(_result_to_json(result)))
        return 0

    print(f"{config.symbol} - {config.time_frame} calendar ({result['source']} data)")
    if result['source'] == 'synthetic':
        print("Using demo data: live API unavailable or not selected.")
    if result['validation_warnings']:
        print(f"Skipped {result['validation_warnings']} invalid rows")
    print()

    frame = calendar_to_frame(result['items'], view_mode=config.view_mode)
    if frame.empty:
        print("No data.")
    else:
        print(_format_frame(frame).to_string())

    return 0


def show_metrics(args: argparse.Namespace) -> int:
    """Run the pipeline and print detail metrics for the selected day."""
    try:
        config = _config_from_args(args)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    result = run_calendar(config)

    if result['status'] != 'completed':
        print(f"ERROR: Failed to load data for {config.symbol}: {result['error_message']}", file=sys.stderr)
        return 1

    detail = describe_day(result['calendar'], args.date.isoformat(), result['records'])
    if detail is None:
        print(f"No {config.time_frame} data for {config.symbol} on {args.date.isoformat()}", file=sys.stderr)
        return 1

    if args.json:
        print(_to_json(detail))
        return 0

    item = detail['item']
    metrics = detail['metrics']

    print(f"{config.symbol} - {format_date_display(detail['date'])}")
    print()
    print(f"   Open:  {format_price(item['open'])}")
    print(f"   High:  {format_price(item['high'])}")
    print(f"   Low:   {format_price(item['low'])}")
    print(f"   Close: {format_price(item['close'])}")
    print(f"   Volume: {format_volume(item['volume'])}")
    if 'period_end' in item:
        period_start = date.fromisoformat(item['period_start'])
        period_end = date.fromisoformat(item['period_end'])
        print(f"   Period: {format_period_range(period_start, period_end)}")
    if 'trading_days' in item:
        print(f"   Trading days: {item['trading_days']}")
    print()
    print(f"   Intraday range: {format_price(metrics['intraday_range'])} "
          f"({format_percentage(metrics['intraday_range_percent'])})")
    print(f"   Price change: {format_percentage(metrics['price_change_percent'], signed=True)}")
    print(f"   Volatility: {format_percentage(item['volatility'])} ({metrics['volatility_level']})")
    print(f"   Trend: {metrics['performance_trend']}")
    print(f"   Volume intensity: {metrics['volume_intensity']}")
    print(f"   Liquidity score: {metrics['liquidity_score']:.0f}/100")

    if detail['history']:
        print()
        print("   Recent days:")
        for day in detail['history']:
            print(f"     {day['date']}  close {format_price(day['close'])}  "
                  f"volume {format_volume(day['volume'])}  "
                  f"volatility {format_percentage(day['volatility'])}")

    return 0


def show_symbols(args: argparse.Namespace) -> int:
    """Print tradable symbols."""
    for symbol in fetch_available_symbols():
        print(symbol)
    return 0


def show_ticker(args: argparse.Namespace) -> int:
    """Print 24h ticker statistics and the best bid/ask."""
    try:
        ticker = normalize_ticker(fetch_ticker_24hr(args.symbol))
        book = normalize_order_book(
            fetch_order_book(args.symbol),
            symbol=args.symbol,
            fetched_at=datetime.now()
        )
    except (BinanceError, NormalizationError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(f"{ticker['symbol']} - 24h")
    print()
    print(f"   Price: {format_price(ticker['price'])} "
          f"({format_percentage(ticker['price_change_percent'], signed=True)})")
    print(f"   High:  {format_price(ticker['high_price'])}")
    print(f"   Low:   {format_price(ticker['low_price'])}")
    print(f"   Volume: {format_volume(ticker['volume'])} ({ticker['count']:,} trades)")
    if book['bids'] and book['asks']:
        best_bid, bid_qty = book['bids'][0]
        best_ask, ask_qty = book['asks'][0]
        print(f"   Best bid: {format_price(best_bid)} x {bid_qty:g}")
        print(f"   Best ask: {format_price(best_ask)} x {ask_qty:g}")

    return 0


def _format_frame(frame):
    """Apply display formatters column by column."""
    formatted = frame.copy()
    for column in formatted.columns:
        if column in PRICE_COLUMNS:
            formatted[column] = formatted[column].map(format_price)
        elif column in VOLUME_COLUMNS:
            formatted[column] = formatted[column].map(format_volume)
        elif column in PERCENT_COLUMNS:
            formatted[column] = formatted[column].map(format_percentage)
    return formatted


def _to_json(payload: Any) -> str:
    """Strict JSON: non-finite floats become null."""
    return json.dumps(_finite_or_none(payload), indent=2, default=str, allow_nan=False)


def _finite_or_none(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {key: _finite_or_none(v) for key, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_finite_or_none(v) for v in value]
    return value


def _result_to_json(result: Dict[str, Any]) -> Dict[str, Any]:
    """JSON view of a pipeline result."""
    return {
        'symbol': result['symbol'],
        'time_frame': result['time_frame'],
        'source': result['source'],
        'rows_fetched': result['rows_fetched'],
        'rows_valid': result['rows_valid'],
        'validation_warnings': result['validation_warnings'],
        'calendar': {key: item.to_dict() for key, item in result['calendar'].items()}
    }


if __name__ == '__main__':
    sys.exit(main())
