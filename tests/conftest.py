"""Pytest configuration and fixtures."""

from typing import Callable, List, Sequence, Tuple

import pytest

from src.core.models import AssetData, PricePoint
from src.backtest.data import HistoricalData
from src.backtest.models import (
    AuctionConfig,
    BacktestConfig,
    CollateralRatioConfig,
    StrategyConfig,
    TimeRange,
    TokenConfig,
)


class FixedRandomSource:
    """
    Deterministic random source for auction tests.

    ``random()`` returns the configured value, ``uniform`` its lower bound and
    ``normal`` its mean. Calls are counted so tests can assert on them.
    """

    def __init__(self, value: float = 0.0):
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value

    def uniform(self, low: float, high: float) -> float:
        return low

    def normal(self, mean: float, std_dev: float) -> float:
        return mean


@pytest.fixture
def ratio_config() -> CollateralRatioConfig:
    """2x leverage token: target ratio 2.0, bounds [1.5, 2.5]."""
    return CollateralRatioConfig(
        min=1.5,
        target=2.0,
        max=2.5,
        pre_liquidation_threshold=1.4,
    )


@pytest.fixture
def test_strategy(ratio_config) -> StrategyConfig:
    """Small strategy with a 1000..2000 backtest window."""
    return StrategyConfig(
        name="TEST-2x",
        collateral=TokenConfig(symbol="COLL"),
        debt=TokenConfig(symbol="DEBT"),
        leverage=2,
        collateral_ratios=ratio_config,
        time_range_data=TimeRange(start=0, end=3000),
        time_range_backtest=TimeRange(start=1000, end=2000),
    )


@pytest.fixture
def backtest_config(test_strategy) -> BacktestConfig:
    """One collateral token deposit, no fees."""
    return BacktestConfig(
        strategy=test_strategy,
        initial_deposit_collateral=1.0,
        estimated_rebalance_gas_cost=5.0,
        management_fee_percentage=0.0,
    )


@pytest.fixture
def instant_auction_config() -> AuctionConfig:
    """Auctions are always created and execute on the next check."""
    return AuctionConfig(
        min_notice_time=0,
        max_notice_time=0,
        avg_auction_duration=0,
        auction_duration_std_dev=0,
        auction_creation_probability=1.0,
        emergency_rebalance_time=0,
    )


@pytest.fixture
def fixed_random() -> FixedRandomSource:
    return FixedRandomSource(0.0)


@pytest.fixture
def make_random() -> Callable[[float], FixedRandomSource]:
    return FixedRandomSource


@pytest.fixture
def make_series() -> Callable[..., AssetData]:
    """Factory building an AssetData from (timestamp, value) pairs."""

    def _make(symbol: str, points: Sequence[Tuple[int, float]], source: str = "test") -> AssetData:
        return AssetData(
            symbol=symbol,
            source=source,
            timeframe="100s",
            data=[PricePoint(timestamp=ts, price=price) for ts, price in points],
        )

    return _make


@pytest.fixture
def make_historical(make_series) -> Callable[..., HistoricalData]:
    """
    Factory building HistoricalData on a 100s grid over 1000..2000.

    Debt and APY default to flat 1.0 USD and 0%. Collateral prices may be a
    constant or a list with one value per tick.
    """

    def _make(collateral=1.0, debt=1.0, apy=0.0) -> HistoricalData:
        timestamps: List[int] = list(range(1000, 2001, 100))

        def _values(value):
            if isinstance(value, (int, float)):
                return [float(value)] * len(timestamps)
            assert len(value) == len(timestamps)
            return list(value)

        return HistoricalData(
            debt_prices=make_series("DEBT", zip(timestamps, _values(debt))),
            collateral_prices=make_series("COLL", zip(timestamps, _values(collateral))),
            borrow_apy=make_series("TEST-2x-BORROW-APY", zip(timestamps, _values(apy))),
        )

    return _make
