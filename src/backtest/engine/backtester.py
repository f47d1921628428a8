"""Historical backtest driver for leverage token strategies."""

import logging
from decimal import localcontext
from typing import List, Optional

from src.core.constants import SECONDS_PER_YEAR
from src.core.fixed_point import FIXED_POINT_CONTEXT, FixedPoint
from src.backtest.models import (
    AuctionConfig,
    BacktestConfig,
    BacktestPeriod,
    BacktestResult,
    RebalanceResult,
    SimulationMetrics,
    StateSnapshot,
)
from src.backtest.data import HistoricalData, TimelinePoint, merge_timelines
from src.backtest.engine.random_source import RandomSource
from src.backtest.engine.simulation import SimulationConfig, SimulationEngine

logger = logging.getLogger(__name__)


class Backtester:
    """
    Runs a leverage token strategy over historical data.

    Usage:
        backtester = Backtester()
        backtester.load_data(historical_data)
        backtester.initialize(config)
        result = backtester.run()

    The three input series are merged into one forward-filled timeline and
    the engine is stepped through it tick by tick.
    """

    def __init__(self):
        self.engine: Optional[SimulationEngine] = None
        self.historical_data: Optional[HistoricalData] = None
        self.config: Optional[BacktestConfig] = None

    def load_data(self, data: HistoricalData) -> None:
        """Set the historical series to replay."""
        self.historical_data = data

    def initialize(
        self,
        config: BacktestConfig,
        random_source: Optional[RandomSource] = None,
        auction_config: Optional[AuctionConfig] = None,
    ) -> SimulationEngine:
        """
        Build the initial leveraged position.

        With deposit X (collateral tokens), target ratio R and prices Pc, Pd:

            R = collateral * Pc / (debt * Pd)
            equity = collateral - debt * Pd / Pc = X

        which gives

            debt = X * Pc / (Pd * (R - 1))
            collateral = R * debt * Pd / Pc

        Shares are minted 1:1 with the deposit.

        Args:
            config: Backtest configuration
            random_source: Randomness for auction timing (unseeded if omitted)
            auction_config: Auction timing parameters (defaults if omitted)

        Returns:
            The initialized SimulationEngine

        Raises:
            ValueError: If no data is loaded or the backtest window has no prices
        """
        if self.historical_data is None:
            raise ValueError("Historical data not loaded. Call load_data() first.")

        strategy = config.strategy
        window = strategy.time_range_backtest

        first_debt_price = self.historical_data.debt_prices.first_at_or_after(window.start)
        first_collateral_price = self.historical_data.collateral_prices.first_at_or_after(window.start)

        if first_debt_price is None or first_collateral_price is None:
            raise ValueError(
                f"No price data available for backtest range starting at {window.start}"
            )

        target_ratio = FixedPoint.to_decimal(strategy.collateral_ratios.target)
        deposit = FixedPoint.to_decimal(config.initial_deposit_collateral)
        collateral_price = FixedPoint.to_decimal(first_collateral_price.price)
        debt_price = FixedPoint.to_decimal(first_debt_price.price)

        with localcontext(FIXED_POINT_CONTEXT):
            debt_amount = deposit * collateral_price / (debt_price * (target_ratio - 1))
            collateral_amount = target_ratio * debt_amount * debt_price / collateral_price

        simulation_config = SimulationConfig(
            initial_collateral=FixedPoint.to_wad(collateral_amount),
            initial_debt=FixedPoint.to_wad(debt_amount),
            initial_shares=FixedPoint.to_wad(deposit),
            collateral_ratios=strategy.collateral_ratios,
            start_timestamp=first_debt_price.timestamp,
            estimated_rebalance_gas_cost=config.estimated_rebalance_gas_cost,
            management_fee_percentage=config.management_fee_percentage,
        )

        self.config = config
        self.engine = SimulationEngine(simulation_config, auction_config, random_source)

        state = self.engine.state
        logger.info(
            f"Initialized simulation for {strategy.name}: "
            f"deposit={config.initial_deposit_collateral} {strategy.collateral.symbol}, "
            f"target leverage={strategy.target_leverage:.2f}x, "
            f"collateral={state.collateral:.6f} {strategy.collateral.symbol}, "
            f"debt={state.debt:.6f} {strategy.debt.symbol}, "
            f"shares={state.shares:.6f}"
        )

        return self.engine

    @staticmethod
    def merge_timelines(debt_prices, collateral_prices, apy_data) -> List[TimelinePoint]:
        """Merge the three series into one forward-filled timeline."""
        return merge_timelines(debt_prices, collateral_prices, apy_data)

    def run(self) -> BacktestResult:
        """
        Step through the backtest window.

        Per tick, in order:
        1. Accrue management fee (since the last fee accrual)
        2. Accrue interest (since the previous tick; skipped on the first)
        3. Advance the engine timestamp
        4. Check for and execute a rebalance
        5. Record a snapshot

        Fees and interest land before the rebalance decision, and the
        snapshot reflects the post-rebalance state.

        Returns:
            BacktestResult with metrics, rebalances and full history

        Raises:
            ValueError: If initialize() was not called, or the window is empty
        """
        if self.engine is None or self.historical_data is None or self.config is None:
            raise ValueError("Backtester not initialized. Call initialize() first.")

        engine = self.engine
        strategy = self.config.strategy
        window = strategy.time_range_backtest
        data = self.historical_data

        timeline = self.merge_timelines(
            data.debt_prices.filter_by_time_range(window.start, window.end),
            data.collateral_prices.filter_by_time_range(window.start, window.end),
            data.borrow_apy.filter_by_time_range(window.start, window.end),
        )

        # Leading ticks before both prices are observed carry zero prices
        warmup = 0
        while warmup < len(timeline) and not timeline[warmup].has_prices:
            warmup += 1
        if warmup:
            logger.warning(f"Skipping {warmup} ticks before first observed prices")
            timeline = timeline[warmup:]

        logger.info(f"Running backtest for {strategy.name}: {len(timeline)} time points")

        rebalances: List[RebalanceResult] = []
        last_timestamp = timeline[0].timestamp if timeline else 0
        progress_interval = max(1, len(timeline) // 20)

        for index, point in enumerate(timeline, start=1):
            time_delta = point.timestamp - last_timestamp
            prices = point.prices
            borrow_rate = point.borrow_rate

            engine.accrue_management_fee(point.timestamp)

            if time_delta > 0:
                engine.accrue_interest(borrow_rate, time_delta)

            engine.update_timestamp(point.timestamp)

            check = engine.check_rebalance_needed(prices)
            if check.needed and check.direction is not None:
                rebalances.append(engine.rebalance(prices, check.direction))

            engine.record_snapshot(prices, borrow_rate.apy)

            last_timestamp = point.timestamp

            if index % progress_interval == 0:
                logger.debug(f"Progress: {index * 100 // len(timeline)}%")

        logger.info(f"Backtest complete: executed {len(rebalances)} rebalances")

        history = engine.history
        metrics = self.calculate_metrics(history, rebalances)

        start = timeline[0].timestamp if timeline else 0
        end = timeline[-1].timestamp if timeline else 0

        return BacktestResult(
            strategy_name=strategy.name,
            period=BacktestPeriod(start=start, end=end),
            metrics=metrics,
            rebalances=rebalances,
            history=history,
        )

    def calculate_metrics(
        self,
        history: List[StateSnapshot],
        rebalances: List[RebalanceResult],
    ) -> SimulationMetrics:
        """
        Compute performance metrics from the snapshot history.

        Args:
            history: Snapshots in chronological order
            rebalances: Executed rebalances

        Returns:
            SimulationMetrics

        Raises:
            ValueError: If the history is empty
        """
        if not history:
            raise ValueError("No history to calculate metrics")
        if self.config is None:
            raise ValueError("Backtester not initialized. Call initialize() first.")

        ratios = self.config.strategy.collateral_ratios
        first = history[0]
        last = history[-1]

        initial_share_price = first.share_price
        final_share_price = last.share_price
        if initial_share_price <= 0:
            raise ValueError(f"Initial share price must be positive, got {initial_share_price}")

        total_return = (final_share_price - initial_share_price) / initial_share_price

        growth = final_share_price / initial_share_price
        duration_years = (last.timestamp - first.timestamp) / SECONDS_PER_YEAR
        if duration_years <= 0:
            annualized_return = 0.0
        elif growth <= 0:
            annualized_return = -1.0
        else:
            try:
                annualized_return = growth ** (1 / duration_years) - 1
            except OverflowError:
                # Very short windows with a gain extrapolate past float range
                annualized_return = float("inf")

        # Max drawdown from the running peak
        peak = initial_share_price
        max_drawdown = 0.0
        for snapshot in history:
            if snapshot.share_price > peak:
                peak = snapshot.share_price
            drawdown = (peak - snapshot.share_price) / peak
            if drawdown > max_drawdown:
                max_drawdown = drawdown

        avg_collateral_ratio = sum(s.collateral_ratio for s in history) / len(history)

        times_below_min = sum(1 for s in history if s.collateral_ratio < ratios.min)
        times_above_max = sum(1 for s in history if s.collateral_ratio > ratios.max)

        total_gas_costs_usd = sum(r.estimated_gas_cost_usd for r in rebalances)

        return SimulationMetrics(
            initial_share_price=initial_share_price,
            final_share_price=final_share_price,
            total_return=total_return,
            annualized_return=annualized_return,
            max_drawdown=max_drawdown,
            rebalance_count=len(rebalances),
            total_gas_costs_usd=total_gas_costs_usd,
            avg_collateral_ratio=avg_collateral_ratio,
            times_below_min=times_below_min,
            times_above_max=times_above_max,
        )
