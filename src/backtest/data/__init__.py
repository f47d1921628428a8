"""Historical data access for backtests."""

from .loader import HistoricalData, HistoricalDataLoader
from .timeline import TimelinePoint, merge_timelines

__all__ = ["HistoricalData", "HistoricalDataLoader", "TimelinePoint", "merge_timelines"]
