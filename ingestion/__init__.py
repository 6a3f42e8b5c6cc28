"""
Data Ingestion Module

Handles fetching and validating market data:
- Binance REST API for daily klines, tickers and order books
- Synthetic kline generator for demo data
"""

__version__ = "0.1.0"
