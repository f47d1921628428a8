"""Auction timing models for rebalance simulation."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class RebalanceDirection(str, Enum):
    """Direction of a rebalance."""
    UP = "UP"        # Ratio above max: borrow more, buy collateral
    DOWN = "DOWN"    # Ratio below min: sell collateral, repay debt


@dataclass
class AuctionConfig:
    """
    Timing parameters for Dutch auction rebalances.

    The simulator is evaluated once per timeline tick, so
    ``auction_creation_probability`` is a per-tick probability: the expected
    wait before an auction is created is roughly tick_spacing / probability.
    Changing the data granularity therefore changes the implied delay, and
    the probability must be chosen for the sampling interval in use
    (the default assumes 5 minute ticks).
    """

    min_notice_time: float = 600            # 10 minutes minimum to notice
    max_notice_time: float = 3600           # 60 minutes maximum to notice
    avg_auction_duration: float = 2400      # 40 minutes average auction duration
    auction_duration_std_dev: float = 1200  # 20 minutes std deviation
    auction_creation_probability: float = 0.05
    emergency_threshold: float = 1.06061    # Pre-liquidation threshold
    emergency_rebalance_time: float = 600   # 10 minutes for emergency rebalance

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ValueError on inconsistent parameters."""
        if self.min_notice_time < 0 or self.max_notice_time < 0:
            raise ValueError("Notice times cannot be negative")
        if self.min_notice_time > self.max_notice_time:
            raise ValueError(
                f"min_notice_time ({self.min_notice_time}) exceeds "
                f"max_notice_time ({self.max_notice_time})"
            )
        if self.auction_duration_std_dev < 0:
            raise ValueError("auction_duration_std_dev cannot be negative")
        if self.emergency_rebalance_time < 0:
            raise ValueError("emergency_rebalance_time cannot be negative")
        if not 0 <= self.auction_creation_probability <= 1:
            raise ValueError(
                f"auction_creation_probability must be within [0, 1], "
                f"got {self.auction_creation_probability}"
            )

    def to_dict(self) -> dict:
        return {
            "min_notice_time": self.min_notice_time,
            "max_notice_time": self.max_notice_time,
            "avg_auction_duration": self.avg_auction_duration,
            "auction_duration_std_dev": self.auction_duration_std_dev,
            "auction_creation_probability": self.auction_creation_probability,
            "emergency_threshold": self.emergency_threshold,
            "emergency_rebalance_time": self.emergency_rebalance_time,
        }


@dataclass(frozen=True)
class NoAuction:
    """No auction is pending."""

    @property
    def is_scheduled(self) -> bool:
        return False


@dataclass(frozen=True)
class ScheduledAuction:
    """An auction waiting to execute."""

    created_at: int
    execute_at: float
    direction: RebalanceDirection
    is_emergency: bool

    @property
    def is_scheduled(self) -> bool:
        return True

    def is_due(self, now: int) -> bool:
        return now >= self.execute_at


# At most one auction exists at a time: the simulator holds exactly one of these
PendingAuction = Union[NoAuction, ScheduledAuction]
NO_AUCTION = NoAuction()


@dataclass(frozen=True)
class AuctionDecision:
    """Outcome of one auction check."""

    should_rebalance: bool
    direction: Optional[RebalanceDirection] = None
    is_emergency: Optional[bool] = None


NO_REBALANCE = AuctionDecision(should_rebalance=False)
