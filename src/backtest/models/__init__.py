"""Backtest data models."""

from .state import (
    LeverageTokenState,
    CollateralRatioConfig,
    MarketPrices,
    BorrowRate,
)
from .auction import (
    RebalanceDirection,
    AuctionConfig,
    AuctionDecision,
    NoAuction,
    ScheduledAuction,
    PendingAuction,
    NO_AUCTION,
    NO_REBALANCE,
)
from .simulation import (
    RebalanceCheck,
    RebalanceResult,
    StateSnapshot,
    SimulationMetrics,
    BacktestPeriod,
    BacktestResult,
)
from .strategy import (
    TimeRange,
    TokenConfig,
    LendingMarketConfig,
    StrategyConfig,
    BacktestConfig,
    STRATEGIES,
    get_strategy,
)

__all__ = [
    "LeverageTokenState",
    "CollateralRatioConfig",
    "MarketPrices",
    "BorrowRate",
    # Auction models
    "RebalanceDirection",
    "AuctionConfig",
    "AuctionDecision",
    "NoAuction",
    "ScheduledAuction",
    "PendingAuction",
    "NO_AUCTION",
    "NO_REBALANCE",
    # Results
    "RebalanceCheck",
    "RebalanceResult",
    "StateSnapshot",
    "SimulationMetrics",
    "BacktestPeriod",
    "BacktestResult",
    # Strategy
    "TimeRange",
    "TokenConfig",
    "LendingMarketConfig",
    "StrategyConfig",
    "BacktestConfig",
    "STRATEGIES",
    "get_strategy",
]
