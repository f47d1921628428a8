"""Simulation result models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from src.core.constants import SECONDS_PER_DAY

from .auction import RebalanceDirection
from .state import LeverageTokenState, MarketPrices


def _ratio_to_json(value: float):
    """Infinite values (e.g. ratio with no debt) are stored as the string "inf"."""
    if value == float("inf"):
        return "inf"
    return value


@dataclass(frozen=True)
class RebalanceCheck:
    """Result of asking the engine whether a rebalance should run now."""

    needed: bool
    current_ratio: float
    direction: Optional[RebalanceDirection] = None


@dataclass(frozen=True)
class RebalanceResult:
    """
    Record of one executed rebalance.

    REBALANCE DOWN (ratio too low): withdraw collateral, swap to debt, repay.
    REBALANCE UP (ratio too high): borrow more, swap to collateral, deposit.

    The gas cost is a reporting figure; it is not deducted from the position.
    """

    state_before: LeverageTokenState
    state_after: LeverageTokenState
    direction: RebalanceDirection
    ratio_before: float
    ratio_after: float
    estimated_gas_cost_usd: float

    @property
    def timestamp(self) -> int:
        return self.state_after.timestamp

    def to_dict(self) -> dict:
        return {
            "state_before": self.state_before.to_dict(),
            "state_after": self.state_after.to_dict(),
            "direction": self.direction.value,
            "ratio_before": _ratio_to_json(self.ratio_before),
            "ratio_after": _ratio_to_json(self.ratio_after),
            "estimated_gas_cost_usd": self.estimated_gas_cost_usd,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RebalanceResult":
        return cls(
            state_before=LeverageTokenState.from_dict(data["state_before"]),
            state_after=LeverageTokenState.from_dict(data["state_after"]),
            direction=RebalanceDirection(data["direction"]),
            ratio_before=float(data["ratio_before"]),
            ratio_after=float(data["ratio_after"]),
            estimated_gas_cost_usd=float(data["estimated_gas_cost_usd"]),
        )


@dataclass(frozen=True)
class StateSnapshot:
    """State of the leverage token at one timeline tick."""

    timestamp: int
    state: LeverageTokenState
    prices: MarketPrices
    borrow_apy: float
    collateral_ratio: float
    share_price: float      # In collateral token units
    equity_usd: float

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "state": self.state.to_dict(),
            "prices": self.prices.to_dict(),
            "borrow_apy": self.borrow_apy,
            "collateral_ratio": _ratio_to_json(self.collateral_ratio),
            "share_price": self.share_price,
            "equity_usd": self.equity_usd,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StateSnapshot":
        return cls(
            timestamp=int(data["timestamp"]),
            state=LeverageTokenState.from_dict(data["state"]),
            prices=MarketPrices.from_dict(data["prices"]),
            borrow_apy=float(data["borrow_apy"]),
            collateral_ratio=float(data["collateral_ratio"]),
            share_price=float(data["share_price"]),
            equity_usd=float(data["equity_usd"]),
        )


@dataclass
class SimulationMetrics:
    """Aggregated metrics from a backtest run.

    Returns and drawdown are fractions (0.05 = 5%).
    """

    # Share price (in collateral token)
    initial_share_price: float
    final_share_price: float

    # Returns
    total_return: float
    annualized_return: float

    # Risk
    max_drawdown: float             # Largest peak-to-trough decline

    # Rebalancing
    rebalance_count: int
    total_gas_costs_usd: float
    avg_collateral_ratio: float
    times_below_min: int            # Snapshots with ratio < min
    times_above_max: int            # Snapshots with ratio > max

    def to_dict(self) -> dict:
        return {
            "initial_share_price": self.initial_share_price,
            "final_share_price": self.final_share_price,
            "total_return": self.total_return,
            "annualized_return": _ratio_to_json(self.annualized_return),
            "max_drawdown": self.max_drawdown,
            "rebalance_count": self.rebalance_count,
            "total_gas_costs_usd": self.total_gas_costs_usd,
            "avg_collateral_ratio": _ratio_to_json(self.avg_collateral_ratio),
            "times_below_min": self.times_below_min,
            "times_above_max": self.times_above_max,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationMetrics":
        return cls(
            initial_share_price=float(data["initial_share_price"]),
            final_share_price=float(data["final_share_price"]),
            total_return=float(data["total_return"]),
            annualized_return=float(data["annualized_return"]),
            max_drawdown=float(data["max_drawdown"]),
            rebalance_count=int(data["rebalance_count"]),
            total_gas_costs_usd=float(data["total_gas_costs_usd"]),
            avg_collateral_ratio=float(data["avg_collateral_ratio"]),
            times_below_min=int(data["times_below_min"]),
            times_above_max=int(data["times_above_max"]),
        )


@dataclass(frozen=True)
class BacktestPeriod:
    """Time span covered by a backtest."""

    start: int
    end: int

    @property
    def duration_days(self) -> float:
        return (self.end - self.start) / SECONDS_PER_DAY

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end, "duration_days": self.duration_days}

    @classmethod
    def from_dict(cls, data: dict) -> "BacktestPeriod":
        return cls(start=int(data["start"]), end=int(data["end"]))


@dataclass
class BacktestResult:
    """
    Complete result of a backtest run.

    Contains the full snapshot history, every executed rebalance and the
    aggregated metrics.
    """

    strategy_name: str
    period: BacktestPeriod
    metrics: SimulationMetrics
    rebalances: List[RebalanceResult] = field(default_factory=list)
    history: List[StateSnapshot] = field(default_factory=list)

    # Metadata
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = datetime.now(timezone.utc)

    @property
    def share_price_series(self) -> List[float]:
        """Extract share prices for charting."""
        return [s.share_price for s in self.history]

    @property
    def ratio_series(self) -> List[float]:
        """Extract collateral ratios for charting."""
        return [s.collateral_ratio for s in self.history]

    @property
    def timestamps(self) -> List[int]:
        return [s.timestamp for s in self.history]

    def to_dict(self) -> dict:
        """Serialize for storage."""
        return {
            "strategy_name": self.strategy_name,
            "period": self.period.to_dict(),
            "metrics": self.metrics.to_dict(),
            "rebalances": [r.to_dict() for r in self.rebalances],
            "history": [s.to_dict() for s in self.history],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BacktestResult":
        created_at = data.get("created_at")
        return cls(
            strategy_name=data["strategy_name"],
            period=BacktestPeriod.from_dict(data["period"]),
            metrics=SimulationMetrics.from_dict(data["metrics"]),
            rebalances=[RebalanceResult.from_dict(r) for r in data.get("rebalances", [])],
            history=[StateSnapshot.from_dict(s) for s in data.get("history", [])],
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )
