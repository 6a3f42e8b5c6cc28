"""
Analysis Engine Module

Turns daily market records into calendar data:
- Week and month period summaries (aggregation engine)
- Per-day detail metrics (range, price change, volume intensity, liquidity score)
- Date-keyed calendar lookup and tabular views
"""

__version__ = "0.1.0"
