"""Leverage token simulation engine."""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal, localcontext
from typing import List, Optional

from src.core.constants import SECONDS_PER_YEAR
from src.core.fixed_point import FIXED_POINT_CONTEXT, FixedPoint
from src.backtest.models import (
    AuctionConfig,
    BorrowRate,
    CollateralRatioConfig,
    LeverageTokenState,
    MarketPrices,
    PendingAuction,
    RebalanceCheck,
    RebalanceDirection,
    RebalanceResult,
    StateSnapshot,
)
from src.backtest.engine.auction import AuctionSimulator
from src.backtest.engine.random_source import RandomSource

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    """Initial state and policy of a simulated leverage token."""

    initial_collateral: int         # WAD, e.g. 17e18 for 17 weETH
    initial_debt: int               # WAD
    initial_shares: int             # WAD
    collateral_ratios: CollateralRatioConfig
    start_timestamp: int
    estimated_rebalance_gas_cost: float = 0.0   # USD per rebalance
    management_fee_percentage: float = 0.0      # Annual, e.g. 0.02 = 2%


class SimulationEngine:
    """
    Financial state machine of a leverage token.

    Tracks collateral, debt and shares and applies the same operations as
    the on-chain protocol: management fee dilution, debt interest, and
    rebalances back to the target collateral ratio. Rebalance timing is
    delegated to an AuctionSimulator.
    """

    def __init__(
        self,
        config: SimulationConfig,
        auction_config: Optional[AuctionConfig] = None,
        random_source: Optional[RandomSource] = None,
    ):
        """
        Initialize engine.

        Args:
            config: Initial state and ratio policy
            auction_config: Auction timing parameters; the emergency
                threshold always comes from the collateral ratio config
            random_source: Randomness for the auction simulator
        """
        self._state = LeverageTokenState(
            collateral_amount=config.initial_collateral,
            debt_amount=config.initial_debt,
            total_shares=config.initial_shares,
            timestamp=config.start_timestamp,
        )
        self.ratios = config.collateral_ratios
        self.estimated_rebalance_gas_cost = config.estimated_rebalance_gas_cost
        self.management_fee_percentage = config.management_fee_percentage
        self.last_fee_accrual_timestamp = config.start_timestamp
        self._history: List[StateSnapshot] = []

        auction_config = replace(
            auction_config or AuctionConfig(),
            emergency_threshold=config.collateral_ratios.pre_liquidation_threshold,
        )
        self.auction_simulator = AuctionSimulator(auction_config, random_source)

    @property
    def state(self) -> LeverageTokenState:
        """Current state (immutable value)."""
        return self._state

    @property
    def history(self) -> List[StateSnapshot]:
        """Copy of the recorded snapshots."""
        return list(self._history)

    @property
    def auction_info(self) -> PendingAuction:
        return self.auction_simulator.auction_info

    # Derived values

    def calculate_collateral_ratio(self, prices: MarketPrices) -> float:
        """
        Collateral ratio at the given prices.

        ratio = (collateral * collateral_price) / (debt * debt_price)

        Returns infinity when there is no debt.
        """
        with localcontext(FIXED_POINT_CONTEXT):
            debt_value = (
                Decimal(self._state.debt_amount) * FixedPoint.to_decimal(prices.debt_price_usd)
            )
            if debt_value == 0:
                return float("inf")

            collateral_value = (
                Decimal(self._state.collateral_amount)
                * FixedPoint.to_decimal(prices.collateral_price_usd)
            )
            return float(collateral_value / debt_value)

    def calculate_share_price(self, prices: MarketPrices) -> float:
        """
        Share price in collateral token units.

        share_price = (collateral - debt * debt_price / collateral_price) / total_shares

        Shares are a claim on equity, like an ERC-4626 vault. A token with no
        shares outstanding has a share price of 0.
        """
        if self._state.total_shares == 0 or prices.collateral_price_usd <= 0:
            return 0.0

        with localcontext(FIXED_POINT_CONTEXT):
            debt_in_collateral = (
                Decimal(self._state.debt_amount)
                * FixedPoint.to_decimal(prices.debt_price_usd)
                / FixedPoint.to_decimal(prices.collateral_price_usd)
            )
            equity_in_collateral = Decimal(self._state.collateral_amount) - debt_in_collateral
            return float(equity_in_collateral / Decimal(self._state.total_shares))

    def calculate_equity_usd(self, prices: MarketPrices) -> float:
        """Equity in USD: collateral value minus debt value."""
        with localcontext(FIXED_POINT_CONTEXT):
            collateral_value = (
                FixedPoint.from_wad(self._state.collateral_amount)
                * FixedPoint.to_decimal(prices.collateral_price_usd)
            )
            debt_value = (
                FixedPoint.from_wad(self._state.debt_amount)
                * FixedPoint.to_decimal(prices.debt_price_usd)
            )
            return float(collateral_value - debt_value)

    # State transitions

    def accrue_management_fee(self, current_timestamp: int) -> None:
        """
        Dilute shareholders by minting fee shares to the treasury.

        fee_shares = total_shares * fee * elapsed / SECONDS_PER_YEAR

        Elapsed time is measured from the last fee accrual, not from the
        previous tick.
        """
        if self.management_fee_percentage == 0:
            return

        time_elapsed = current_timestamp - self.last_fee_accrual_timestamp
        if time_elapsed <= 0:
            return

        with localcontext(FIXED_POINT_CONTEXT):
            fee_multiplier = (
                FixedPoint.to_decimal(self.management_fee_percentage)
                * Decimal(time_elapsed)
                / FixedPoint.to_decimal(SECONDS_PER_YEAR)
            )
        fee_shares = FixedPoint.mul_floor(self._state.total_shares, fee_multiplier)

        self._state = self._state.evolve(total_shares=self._state.total_shares + fee_shares)
        self.last_fee_accrual_timestamp = current_timestamp

    def accrue_interest(self, borrow_rate: BorrowRate, time_delta: int) -> None:
        """
        Grow debt by the borrow APY over ``time_delta`` seconds.

        new_debt = debt * (1 + apy * time_delta / SECONDS_PER_YEAR)

        Linear approximation of continuous compounding, applied per tick.
        """
        if time_delta <= 0 or self._state.debt_amount == 0:
            return

        with localcontext(FIXED_POINT_CONTEXT):
            interest_multiplier = 1 + (
                FixedPoint.to_decimal(borrow_rate.apy)
                * Decimal(time_delta)
                / FixedPoint.to_decimal(SECONDS_PER_YEAR)
            )
        new_debt = FixedPoint.mul_floor(self._state.debt_amount, interest_multiplier)

        self._state = self._state.evolve(debt_amount=new_debt, timestamp=borrow_rate.timestamp)

    def update_timestamp(self, timestamp: int) -> None:
        """Advance simulation time."""
        self._state = self._state.evolve(timestamp=timestamp)

    def check_rebalance_needed(self, prices: MarketPrices) -> RebalanceCheck:
        """
        Ask the auction simulator whether a rebalance executes now.

        An in-bounds ratio always clears any pending auction, including one
        scheduled while the ratio was briefly out of bounds.
        """
        ratio = self.calculate_collateral_ratio(prices)

        decision = self.auction_simulator.check_rebalance(
            prices.timestamp,
            ratio,
            self.ratios.min,
            self.ratios.max,
        )

        if self.ratios.is_in_bounds(ratio):
            self.auction_simulator.reset()

        return RebalanceCheck(
            needed=decision.should_rebalance,
            current_ratio=ratio,
            direction=decision.direction,
        )

    def rebalance(self, prices: MarketPrices, direction: RebalanceDirection) -> RebalanceResult:
        """
        Move the position back to the target ratio at constant total value.

        Total value in debt units:  V = debt + collateral * Pc / Pd
        Solving V = D + C * Pc / Pd  and  C * Pc / (D * Pd) = target:
            D = V / (1 + target)
            C = D * target * Pd / Pc

        Swap slippage and DEX fees are borne by the external rebalancer, not
        the vault, so only nominal value is conserved. The direction is
        informational; the amounts follow from the target alone.

        Args:
            prices: Market prices used for the swap
            direction: UP or DOWN

        Returns:
            RebalanceResult with before/after state
        """
        if prices.collateral_price_usd <= 0 or prices.debt_price_usd <= 0:
            raise ValueError(
                f"Cannot rebalance at non-positive prices: collateral={prices.collateral_price_usd}, "
                f"debt={prices.debt_price_usd}"
            )

        state_before = self._state
        ratio_before = self.calculate_collateral_ratio(prices)

        with localcontext(FIXED_POINT_CONTEXT):
            collateral_price = FixedPoint.to_decimal(prices.collateral_price_usd)
            debt_price = FixedPoint.to_decimal(prices.debt_price_usd)
            target = FixedPoint.to_decimal(self.ratios.target)

            total_value = (
                Decimal(state_before.debt_amount)
                + Decimal(state_before.collateral_amount) * collateral_price / debt_price
            )
            target_debt = total_value / (1 + target)
            target_collateral = target_debt * target * debt_price / collateral_price

        self._state = state_before.evolve(
            collateral_amount=FixedPoint.floor(target_collateral),
            debt_amount=FixedPoint.floor(target_debt),
            timestamp=prices.timestamp,
        )

        self.auction_simulator.reset()

        ratio_after = self.calculate_collateral_ratio(prices)
        logger.debug(
            f"Rebalance {direction.value} at {prices.timestamp}: "
            f"ratio {ratio_before:.6f} -> {ratio_after:.6f}"
        )

        return RebalanceResult(
            state_before=state_before,
            state_after=self._state,
            direction=direction,
            ratio_before=ratio_before,
            ratio_after=ratio_after,
            estimated_gas_cost_usd=self.estimated_rebalance_gas_cost,
        )

    def record_snapshot(self, prices: MarketPrices, borrow_apy: float) -> StateSnapshot:
        """
        Append a snapshot of the current state to the history.

        Args:
            prices: Current market prices
            borrow_apy: Current borrow APY

        Returns:
            The recorded snapshot
        """
        snapshot = StateSnapshot(
            timestamp=self._state.timestamp,
            state=self._state,
            prices=prices,
            borrow_apy=borrow_apy,
            collateral_ratio=self.calculate_collateral_ratio(prices),
            share_price=self.calculate_share_price(prices),
            equity_usd=self.calculate_equity_usd(prices),
        )
        self._history.append(snapshot)
        return snapshot
