"""
Tests for the CLI - synthetic data source with mocked generator, no network.
"""

import json
import pytest
from unittest.mock import patch
from datetime import date, datetime, time, timezone

import cli


def kline(day, open, high, low, close, volume):
    open_time = int(datetime.combine(day, time.min, tzinfo=timezone.utc).timestamp() * 1000)
    return [open_time, str(open), str(high), str(low), str(close), str(volume)]


KLINES = [
    kline(date(2024, 3, 4), 100.0, 115.0, 95.0, 110.0, 1000.0),
    kline(date(2024, 3, 5), 110.0, 120.0, 100.0, 105.0, 2000.0),
]


@pytest.fixture
def synthetic_klines():
    with patch('pipeline.calendar_dag.generate_klines', return_value=KLINES) as mock_generate:
        yield mock_generate


class TestCalendarCommand:
    """Tests for `cli.py calendar`."""

    def test_weekly_table(self, synthetic_klines, capsys):
        exit_code = cli.main([
            'calendar', 'btcusdt', '--time-frame', 'weekly',
            '--year', '2024', '--month', '3', '--source', 'synthetic'
        ])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert 'BTCUSDT - weekly calendar (synthetic data)' in out
        assert '2024-03-03' in out
        assert '$100.00' in out
        assert '3.0K' in out

    def test_json_output(self, synthetic_klines, capsys):
        exit_code = cli.main([
            'calendar', 'BTCUSDT', '--time-frame', 'monthly',
            '--year', '2024', '--source', 'synthetic', '--json'
        ])

        payload = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert payload['source'] == 'synthetic'
        assert len(payload['calendar']) == 12
        march = payload['calendar']['2024-03-01']
        assert march['trading_days'] == 2
        assert march['monthly_performance'] == pytest.approx(5)
        assert payload['calendar']['2024-01-01']['symbol'] == ''

    def test_view_mode(self, synthetic_klines, capsys):
        cli.main(['calendar', 'BTCUSDT', '--source', 'synthetic', '--view', 'liquidity'])

        out = capsys.readouterr().out
        assert 'liquidity' in out
        assert 'volatility' not in out

    def test_pipeline_failure(self, capsys):
        with patch('cli.run_calendar', return_value={'status': 'failed', 'error_message': 'offline'}):
            exit_code = cli.main(['calendar', 'BTCUSDT', '--source', 'binance'])

        assert exit_code == 1
        assert 'offline' in capsys.readouterr().err

    def test_default_symbol_from_env(self, synthetic_klines, monkeypatch, capsys):
        monkeypatch.setenv('CALENDAR_DEFAULT_SYMBOL', 'ethusdt')

        exit_code = cli.main(['calendar', '--source', 'synthetic'])

        assert exit_code == 0
        assert 'ETHUSDT - daily calendar' in capsys.readouterr().out

    def test_month_is_one_based(self):
        with pytest.raises(SystemExit):
            cli.main(['calendar', 'BTCUSDT', '--month', '0'])


class TestMetricsCommand:
    """Tests for `cli.py metrics`."""

    def test_daily_metrics(self, synthetic_klines, capsys):
        exit_code = cli.main(['metrics', 'BTCUSDT', '2024-03-04', '--source', 'synthetic'])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert 'March 04, 2024' in out
        assert 'Price change: +10.00%' in out
        assert 'Volume intensity: Low' in out
        assert 'Volatility: 20.00% (High)' in out
        assert 'Trend: up' in out
        assert 'Recent days:' in out
        assert '2024-03-04  close $110.00' in out

    def test_weekly_metrics_json(self, synthetic_klines, capsys):
        exit_code = cli.main([
            'metrics', 'BTCUSDT', '2024-03-03', '--time-frame', 'weekly',
            '--year', '2024', '--month', '3', '--source', 'synthetic', '--json'
        ])

        detail = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert detail['item']['trading_days'] == 2
        assert detail['metrics']['intraday_range'] == pytest.approx(25)
        assert detail['metrics']['volatility_level'] == 'High'
        assert [h['date'] for h in detail['history']] == ['2024-03-04', '2024-03-05']

    def test_empty_week_json_is_strict(self, synthetic_klines, capsys):
        """Sentinel periods have 0/0 percentages, written as null."""
        exit_code = cli.main([
            'metrics', 'BTCUSDT', '2024-03-24', '--time-frame', 'weekly',
            '--year', '2024', '--month', '3', '--source', 'synthetic', '--json'
        ])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert 'NaN' not in out
        assert 'Infinity' not in out
        detail = json.loads(out)
        assert detail['item']['trading_days'] == 0
        assert detail['metrics']['intraday_range_percent'] is None
        assert detail['metrics']['price_change_percent'] is None
        assert detail['history'] == [
            {'date': '2024-03-04', 'close': 110.0, 'volume': 1000.0, 'volatility': pytest.approx(20)},
            {'date': '2024-03-05', 'close': 105.0, 'volume': 2000.0, 'volatility': pytest.approx(18.1818, rel=1e-4)},
        ]

    def test_missing_day(self, synthetic_klines, capsys):
        exit_code = cli.main(['metrics', 'BTCUSDT', '2024-03-09', '--source', 'synthetic'])

        assert exit_code == 1
        assert 'No daily data' in capsys.readouterr().err


class TestSymbolsCommand:
    """Tests for `cli.py symbols`."""

    def test_lists_symbols(self, capsys):
        with patch('cli.fetch_available_symbols', return_value=['BTCUSDT', 'ETHUSDT']):
            exit_code = cli.main(['symbols'])

        assert exit_code == 0
        assert capsys.readouterr().out.split() == ['BTCUSDT', 'ETHUSDT']


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 1
    assert 'usage' in capsys.readouterr().out.lower()


class TestTickerCommand:
    """Tests for `cli.py ticker`."""

    TICKER = {
        'symbol': 'ETHUSDT',
        'lastPrice': '3150.25',
        'priceChange': '-32.10',
        'priceChangePercent': '-1.008',
        'highPrice': '3220.00',
        'lowPrice': '3101.50',
        'volume': '254300.5',
        'count': 812345,
    }
    BOOK = {
        'bids': [['3150.20', '4.5'], ['3150.10', '1.0']],
        'asks': [['3150.30', '2.25']],
    }

    def test_prints_ticker_and_top_of_book(self, capsys):
        with patch('cli.fetch_ticker_24hr', return_value=self.TICKER), \
                patch('cli.fetch_order_book', return_value=self.BOOK):
            exit_code = cli.main(['ticker', 'ETHUSDT'])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert 'ETHUSDT - 24h' in out
        assert 'Price: $3,150.25 (-1.01%)' in out
        assert '812,345 trades' in out
        assert 'Best bid: $3,150.20 x 4.5' in out
        assert 'Best ask: $3,150.30 x 2.25' in out

    def test_api_failure(self, capsys):
        error = cli.BinanceError("Failed to fetch 24hr ticker for ETHUSDT: offline")
        with patch('cli.fetch_ticker_24hr', side_effect=error):
            exit_code = cli.main(['ticker', 'ETHUSDT'])

        assert exit_code == 1
        assert 'offline' in capsys.readouterr().err
