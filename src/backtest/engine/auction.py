"""Dutch auction timing simulation for rebalances."""

import logging
from typing import Optional

from src.backtest.models import (
    AuctionConfig,
    AuctionDecision,
    PendingAuction,
    RebalanceDirection,
    ScheduledAuction,
    NO_AUCTION,
    NO_REBALANCE,
)
from src.backtest.engine.random_source import NumpyRandomSource, RandomSource

logger = logging.getLogger(__name__)


class AuctionSimulator:
    """
    Simulates when an out-of-bounds position actually gets rebalanced.

    Rebalances are executed by external actors through Dutch auctions, so a
    position that leaves its bounds is not corrected instantly:

    1. Someone has to notice and create the auction. Each check has a
       ``auction_creation_probability`` chance of that happening.
    2. The auction then takes a notice time (uniform) plus a duration
       (normal, clamped at zero) before a taker executes it.
    3. Below the emergency threshold the probabilistic step is skipped and
       the rebalance executes after ``emergency_rebalance_time``.

    At most one auction is pending at any time.
    """

    def __init__(
        self,
        config: Optional[AuctionConfig] = None,
        random_source: Optional[RandomSource] = None,
    ):
        """
        Initialize simulator.

        Args:
            config: Auction timing parameters (defaults if omitted)
            random_source: Source of random draws (unseeded numpy if omitted)
        """
        self.config = config or AuctionConfig()
        self.random_source = random_source or NumpyRandomSource()
        self._auction: PendingAuction = NO_AUCTION

    @property
    def auction_info(self) -> PendingAuction:
        """Currently pending auction, or NO_AUCTION."""
        return self._auction

    @property
    def has_pending_auction(self) -> bool:
        return self._auction.is_scheduled

    def check_rebalance(
        self,
        current_timestamp: int,
        current_ratio: float,
        min_ratio: float,
        max_ratio: float,
    ) -> AuctionDecision:
        """
        Decide whether a rebalance fires at this check.

        Args:
            current_timestamp: Current simulation timestamp
            current_ratio: Current collateral ratio
            min_ratio: Minimum allowed ratio
            max_ratio: Maximum allowed ratio

        Returns:
            AuctionDecision; direction and emergency flag are set only when
            a pending auction executes
        """
        auction = self._auction
        if isinstance(auction, ScheduledAuction):
            if auction.is_due(current_timestamp):
                self._auction = NO_AUCTION
                return AuctionDecision(
                    should_rebalance=True,
                    direction=auction.direction,
                    is_emergency=auction.is_emergency,
                )
            return NO_REBALANCE

        if min_ratio <= current_ratio <= max_ratio:
            return NO_REBALANCE

        direction = RebalanceDirection.DOWN if current_ratio < min_ratio else RebalanceDirection.UP

        if current_ratio < self.config.emergency_threshold:
            self._schedule(
                current_timestamp,
                current_timestamp + self.config.emergency_rebalance_time,
                direction,
                is_emergency=True,
            )
            return NO_REBALANCE

        # One Bernoulli trial per check
        if self.random_source.random() < self.config.auction_creation_probability:
            notice_time = self.random_source.uniform(
                self.config.min_notice_time, self.config.max_notice_time
            )
            duration = self.random_source.normal(
                self.config.avg_auction_duration, self.config.auction_duration_std_dev
            )
            self._schedule(
                current_timestamp,
                current_timestamp + notice_time + max(0.0, duration),
                direction,
                is_emergency=False,
            )

        return NO_REBALANCE

    def reset(self) -> None:
        """Drop any pending auction (ratio back in bounds, or rebalance done)."""
        self._auction = NO_AUCTION

    def _schedule(
        self,
        created_at: int,
        execute_at: float,
        direction: RebalanceDirection,
        is_emergency: bool,
    ) -> None:
        self._auction = ScheduledAuction(
            created_at=created_at,
            execute_at=execute_at,
            direction=direction,
            is_emergency=is_emergency,
        )
        logger.debug(
            f"Auction scheduled at {created_at}: {direction.value}, "
            f"executes at {execute_at:.0f}{' (emergency)' if is_emergency else ''}"
        )
