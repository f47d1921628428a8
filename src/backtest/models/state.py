"""Leverage token state and market input models."""

from dataclasses import dataclass, replace
from datetime import datetime, timezone

from src.core.fixed_point import FixedPoint


@dataclass(frozen=True)
class LeverageTokenState:
    """
    Complete state of a leverage token at a point in time.

    A leverage token holds collateral (e.g. weETH) in a lending market,
    borrows debt (e.g. WETH) against it, and issues shares representing a
    claim on the equity.

    Amounts are WAD-scaled integers (1e18 = one token). The dataclass is
    frozen, so handing it to a caller never exposes live engine state.
    """

    collateral_amount: int
    debt_amount: int
    total_shares: int
    timestamp: int  # Unix seconds

    def __post_init__(self):
        for name in ("collateral_amount", "debt_amount", "total_shares"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative: {getattr(self, name)}")

    def evolve(self, **changes) -> "LeverageTokenState":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @property
    def collateral(self) -> float:
        """Collateral in token units (reporting only)."""
        return FixedPoint.to_float(self.collateral_amount)

    @property
    def debt(self) -> float:
        """Debt in token units (reporting only)."""
        return FixedPoint.to_float(self.debt_amount)

    @property
    def shares(self) -> float:
        """Shares in token units (reporting only)."""
        return FixedPoint.to_float(self.total_shares)

    def to_dict(self) -> dict:
        """Serialize to dictionary; amounts as exact decimal strings."""
        return {
            "collateral_amount": str(self.collateral_amount),
            "debt_amount": str(self.debt_amount),
            "total_shares": str(self.total_shares),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LeverageTokenState":
        """Deserialize from dictionary."""
        return cls(
            collateral_amount=int(data["collateral_amount"]),
            debt_amount=int(data["debt_amount"]),
            total_shares=int(data["total_shares"]),
            timestamp=int(data["timestamp"]),
        )


@dataclass(frozen=True)
class CollateralRatioConfig:
    """
    Collateral ratio bounds for a leverage token.

    Collateral Ratio = Collateral Value (USD) / Debt Value (USD)

    - ratio < min: rebalance DOWN (sell collateral, repay debt)
    - ratio > max: rebalance UP (borrow more, buy collateral)
    - target: ratio restored by every rebalance
    - pre_liquidation_threshold: below min; out-of-bounds positions under it
      are fast-tracked by an emergency rebalance

    Example for weETH-WETH-17x:
    min=1.06135, target=1.0625, max=1.062893, pre_liquidation=1.06061
    """

    min: float
    target: float
    max: float
    pre_liquidation_threshold: float

    def __post_init__(self):
        if not (self.pre_liquidation_threshold < self.min < self.target < self.max):
            raise ValueError(
                "Collateral ratios must satisfy pre_liquidation_threshold < min < target < max, "
                f"got {self.pre_liquidation_threshold} / {self.min} / {self.target} / {self.max}"
            )
        if self.target <= 1:
            raise ValueError(f"Target collateral ratio must be above 1, got {self.target}")

    def is_in_bounds(self, ratio: float) -> bool:
        """Whether a ratio lies within [min, max]."""
        return self.min <= ratio <= self.max

    @property
    def target_leverage(self) -> float:
        """Leverage implied by the target ratio: 1 / (1 - 1/target)."""
        return 1 / (1 - 1 / self.target)

    def to_dict(self) -> dict:
        return {
            "min": self.min,
            "target": self.target,
            "max": self.max,
            "pre_liquidation_threshold": self.pre_liquidation_threshold,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CollateralRatioConfig":
        return cls(
            min=float(data["min"]),
            target=float(data["target"]),
            max=float(data["max"]),
            pre_liquidation_threshold=float(data["pre_liquidation_threshold"]),
        )


@dataclass(frozen=True)
class MarketPrices:
    """USD prices of both assets at a point in time."""

    collateral_price_usd: float
    debt_price_usd: float
    timestamp: int

    @property
    def collateral_in_debt(self) -> float:
        """Collateral price denominated in the debt asset."""
        if self.debt_price_usd == 0:
            return 0.0
        return self.collateral_price_usd / self.debt_price_usd

    def to_dict(self) -> dict:
        return {
            "collateral_price_usd": self.collateral_price_usd,
            "debt_price_usd": self.debt_price_usd,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MarketPrices":
        return cls(
            collateral_price_usd=float(data["collateral_price_usd"]),
            debt_price_usd=float(data["debt_price_usd"]),
            timestamp=int(data["timestamp"]),
        )


@dataclass(frozen=True)
class BorrowRate:
    """
    Borrow APY of the lending market at a point in time.

    Interest accrues continuously; the engine uses the linear approximation
    debt(t + dt) = debt(t) * (1 + apy * dt / year).
    """

    apy: float  # decimal, e.g. 0.025 = 2.5%
    timestamp: int

    @property
    def as_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)
