"""Backtesting of leverage token strategies over historical data."""

from .models import (
    LeverageTokenState,
    CollateralRatioConfig,
    MarketPrices,
    BorrowRate,
    StrategyConfig,
    BacktestConfig,
    BacktestResult,
)

__all__ = [
    "LeverageTokenState",
    "CollateralRatioConfig",
    "MarketPrices",
    "BorrowRate",
    "StrategyConfig",
    "BacktestConfig",
    "BacktestResult",
]
