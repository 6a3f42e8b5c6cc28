"""
Test Suite for the Market Calendar

Includes:
- Unit tests for period aggregation and detail metrics
- Integration tests for the calendar pipeline (mocked network)
- CLI tests
"""
