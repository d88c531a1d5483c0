"""
Analytics module for brand mention aggregation, trend and spike detection.

This module turns stored brand mentions into dashboard metrics: sentiment
distribution, source breakdown, topic frequency, peak hours, trending
keywords, period-over-period growth and mention volume spikes. Aggregates are
persisted as immutable snapshots for time-series comparison.
"""

__version__ = "1.0.0"
