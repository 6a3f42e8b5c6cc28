"""
Tests for Binance adapter - mocked network calls, no live API hits in CI.
"""

import pytest
import requests
from unittest.mock import Mock, patch

from ingestion.providers.binance_adapter import (
    fetch_klines,
    fetch_ticker_24hr,
    fetch_order_book,
    fetch_available_symbols,
    BinanceError,
    FALLBACK_SYMBOLS,
    DEFAULT_BASE_URL
)


@pytest.fixture(autouse=True)
def default_env(monkeypatch):
    """Run every test against the default base URL and timeout."""
    monkeypatch.delenv('BINANCE_BASE_URL', raising=False)
    monkeypatch.delenv('REQUESTS_TIMEOUT_S', raising=False)


def mock_response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


KLINES = [
    [1709251200000, "100.0", "110.0", "90.0", "105.0", "1500.5", 1709337599999,
     "157552.5", 420, "750.0", "78776.0", "0"],
    [1709337600000, "105.0", "108.0", "101.0", "102.0", "900.0", 1709423999999,
     "91800.0", 310, "450.0", "45900.0", "0"],
]


class TestFetchKlines:
    """Tests for fetch_klines."""

    @patch('ingestion.providers.binance_adapter.requests.get')
    def test_fetch_klines_success(self, mock_get):
        mock_get.return_value = mock_response(KLINES)

        result = fetch_klines('btcusdt', interval='1d', limit=2)

        mock_get.assert_called_once_with(
            f"{DEFAULT_BASE_URL}/klines",
            params={'symbol': 'BTCUSDT', 'interval': '1d', 'limit': 2},
            timeout=30
        )
        assert result == KLINES

    @patch('ingestion.providers.binance_adapter.requests.get')
    def test_base_url_and_timeout_from_env(self, mock_get, monkeypatch):
        monkeypatch.setenv('BINANCE_BASE_URL', 'https://testnet.example.com/api/v3/')
        monkeypatch.setenv('REQUESTS_TIMEOUT_S', '5')
        mock_get.return_value = mock_response([])

        fetch_klines('BTCUSDT')

        args, kwargs = mock_get.call_args
        assert args[0] == 'https://testnet.example.com/api/v3/klines'
        assert kwargs['timeout'] == 5

    @patch('ingestion.providers.binance_adapter.requests.get')
    def test_network_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("Network timeout")

        with pytest.raises(BinanceError, match="Failed to fetch historical data for BTCUSDT"):
            fetch_klines('BTCUSDT')

    @patch('ingestion.providers.binance_adapter.requests.get')
    def test_http_error(self, mock_get):
        response = mock_response({'code': -1121, 'msg': 'Invalid symbol.'})
        response.raise_for_status.side_effect = requests.HTTPError("400 Client Error")
        mock_get.return_value = response

        with pytest.raises(BinanceError, match="400 Client Error"):
            fetch_klines('NOPEUSDT')

    @patch('ingestion.providers.binance_adapter.requests.get')
    def test_unexpected_payload(self, mock_get):
        mock_get.return_value = mock_response({'code': -1, 'msg': 'oops'})

        with pytest.raises(BinanceError, match="Unexpected klines payload"):
            fetch_klines('BTCUSDT')

    def test_invalid_interval(self):
        with pytest.raises(BinanceError, match="Unsupported kline interval"):
            fetch_klines('BTCUSDT', interval='2d')

    def test_invalid_limit(self):
        with pytest.raises(BinanceError, match="limit must be between"):
            fetch_klines('BTCUSDT', limit=0)

    def test_invalid_symbol(self):
        with pytest.raises(BinanceError, match="invalid characters"):
            fetch_klines('BTC/USDT')

        with pytest.raises(BinanceError, match="non-empty"):
            fetch_klines('')


class TestOtherEndpoints:
    """Tests for ticker, depth and exchange info endpoints."""

    @patch('ingestion.providers.binance_adapter.requests.get')
    def test_fetch_ticker(self, mock_get):
        payload = {'symbol': 'ETHUSDT', 'lastPrice': '3500.1', 'count': 12}
        mock_get.return_value = mock_response(payload)

        result = fetch_ticker_24hr('ethusdt')

        mock_get.assert_called_once_with(
            f"{DEFAULT_BASE_URL}/ticker/24hr",
            params={'symbol': 'ETHUSDT'},
            timeout=30
        )
        assert result == payload

    @patch('ingestion.providers.binance_adapter.requests.get')
    def test_fetch_order_book(self, mock_get):
        payload = {'bids': [['100.0', '1.5']], 'asks': [['100.5', '2.0']]}
        mock_get.return_value = mock_response(payload)

        result = fetch_order_book('BTCUSDT')

        mock_get.assert_called_once_with(
            f"{DEFAULT_BASE_URL}/depth",
            params={'symbol': 'BTCUSDT', 'limit': 20},
            timeout=30
        )
        assert result['bids'] == [['100.0', '1.5']]

    @patch('ingestion.providers.binance_adapter.requests.get')
    def test_available_symbols_filters_trading_usdt(self, mock_get):
        mock_get.return_value = mock_response({'symbols': [
            {'symbol': 'BTCUSDT', 'status': 'TRADING'},
            {'symbol': 'ETHBTC', 'status': 'TRADING'},
            {'symbol': 'LUNAUSDT', 'status': 'BREAK'},
            {'symbol': 'SOLUSDT', 'status': 'TRADING'},
        ]})

        assert fetch_available_symbols() == ['BTCUSDT', 'SOLUSDT']

    @patch('ingestion.providers.binance_adapter.requests.get')
    def test_available_symbols_limit(self, mock_get):
        mock_get.return_value = mock_response({'symbols': [
            {'symbol': f'C{i}USDT', 'status': 'TRADING'} for i in range(15)
        ]})

        assert len(fetch_available_symbols(limit=10)) == 10

    @patch('ingestion.providers.binance_adapter.requests.get')
    def test_available_symbols_fallback(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("offline")

        assert fetch_available_symbols() == FALLBACK_SYMBOLS
