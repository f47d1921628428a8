"""Persistence of strategies and backtest results."""

from .storage import DecimalEncoder, ResultStorage

__all__ = ["DecimalEncoder", "ResultStorage"]
