"""
Binance adapter - fetch market data from the Binance REST API (v3).
Network IO allowed here, but minimal business logic.
"""

import os
import logging
import requests
from typing import Dict, Any, List, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Set up logger
logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'https://api.binance.com/api/v3'

# Returned when the exchange info endpoint is unreachable
FALLBACK_SYMBOLS = ['BTCUSDT', 'ETHUSDT', 'ADAUSDT', 'SOLUSDT', 'DOTUSDT']

VALID_INTERVALS = {
    '1m', '3m', '5m', '15m', '30m', '1h', '2h', '4h', '6h', '8h', '12h',
    '1d', '3d', '1w', '1M'
}


class BinanceError(Exception):
    """Raised when Binance operations fail."""
    pass


def fetch_ticker_24hr(symbol: str) -> Dict[str, Any]:
    """
    Fetch 24 hour rolling ticker statistics for a symbol.

    Args:
        symbol: Trading pair (e.g., 'BTCUSDT')

    Returns:
        Raw ticker dictionary in Binance format

    Raises:
        BinanceError: If the request fails
    """
    symbol = _validate_symbol(symbol)
    return _get('/ticker/24hr', {'symbol': symbol}, what=f"ticker data for {symbol}")


def fetch_klines(symbol: str, interval: str = '1d', limit: int = 30) -> List[List[Any]]:
    """
    Fetch historical kline (candlestick) rows for a symbol.
    Returns raw data in provider format - no normalization.

    Each row is [open_time_ms, open, high, low, close, volume, close_time_ms,
    quote_volume, trades, taker_base_volume, taker_quote_volume, ignore] with
    prices and volumes as strings.

    Args:
        symbol: Trading pair (e.g., 'BTCUSDT')
        interval: Kline interval (default: '1d')
        limit: Number of klines, most recent last (1-1000)

    Returns:
        List of raw kline rows, oldest first

    Raises:
        BinanceError: If inputs are invalid or the request fails
    """
    symbol = _validate_symbol(symbol)

    if interval not in VALID_INTERVALS:
        raise BinanceError(f"Unsupported kline interval: {interval}")

    if not isinstance(limit, int) or not 1 <= limit <= 1000:
        raise BinanceError(f"limit must be between 1 and 1000, got {limit}")

    data = _get(
        '/klines',
        {'symbol': symbol, 'interval': interval, 'limit': limit},
        what=f"historical data for {symbol}"
    )

    if not isinstance(data, list):
        raise BinanceError(f"Unexpected klines payload for {symbol}: {type(data)}")

    logger.info(f"Fetched {len(data)} {interval} klines for {symbol}")
    return data


def fetch_order_book(symbol: str, limit: int = 20) -> Dict[str, Any]:
    """
    Fetch order book depth for a symbol.

    Args:
        symbol: Trading pair (e.g., 'BTCUSDT')
        limit: Number of price levels per side

    Returns:
        Raw depth dictionary with 'bids' and 'asks' lists of [price, qty] strings

    Raises:
        BinanceError: If the request fails
    """
    symbol = _validate_symbol(symbol)
    return _get('/depth', {'symbol': symbol, 'limit': limit}, what=f"order book data for {symbol}")


def fetch_available_symbols(limit: int = 10) -> List[str]:
    """
    List tradable USDT pairs.

    Falls back to a fixed list of major pairs when the exchange info
    endpoint cannot be reached.

    Args:
        limit: Maximum number of symbols to return

    Returns:
        List of symbol strings
    """
    try:
        data = _get('/exchangeInfo', None, what="exchange info")
    except BinanceError as e:
        logger.warning(f"Using fallback symbols: {e}")
        return list(FALLBACK_SYMBOLS)

    symbols = [
        s['symbol'] for s in data.get('symbols', [])
        if s.get('status') == 'TRADING' and 'USDT' in s.get('symbol', '')
    ]
    return symbols[:limit]


def _get(path: str, params: Optional[Dict[str, Any]], what: str) -> Any:
    """
    Issue a GET request against the configured base URL.

    Raises:
        BinanceError: On network failure, HTTP error or invalid JSON
    """
    base_url = os.getenv('BINANCE_BASE_URL', DEFAULT_BASE_URL).rstrip('/')
    timeout = int(os.getenv('REQUESTS_TIMEOUT_S', '30'))

    try:
        response = requests.get(f"{base_url}{path}", params=params, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Error fetching {what}: {e}")
        raise BinanceError(f"Failed to fetch {what}: {e}") from e


def _validate_symbol(symbol: str) -> str:
    """
    Basic symbol validation.

    Returns:
        Upper-cased symbol

    Raises:
        BinanceError: If symbol is invalid
    """
    if not symbol or not isinstance(symbol, str):
        raise BinanceError("Symbol must be non-empty string")

    symbol = symbol.upper()

    if len(symbol) > 20:
        raise BinanceError("Symbol too long (max 20 characters)")

    if not symbol.isalnum():
        raise BinanceError(f"Symbol contains invalid characters: {symbol}")

    return symbol
