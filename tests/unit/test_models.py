"""Unit tests for backtest data models."""

import pytest

from src.core.constants import WAD
from src.core.models import AssetData, PricePoint
from src.backtest.models import (
    AuctionConfig,
    BacktestConfig,
    BacktestPeriod,
    CollateralRatioConfig,
    LeverageTokenState,
    MarketPrices,
    NO_AUCTION,
    RebalanceDirection,
    RebalanceResult,
    STRATEGIES,
    ScheduledAuction,
    StrategyConfig,
    TimeRange,
    LendingMarketConfig,
    get_strategy,
)


class TestLeverageTokenState:
    """Tests for LeverageTokenState."""

    def test_negative_amounts_rejected(self):
        with pytest.raises(ValueError):
            LeverageTokenState(collateral_amount=-1, debt_amount=0, total_shares=0, timestamp=0)
        with pytest.raises(ValueError):
            LeverageTokenState(collateral_amount=0, debt_amount=-1, total_shares=0, timestamp=0)

    def test_evolve_returns_new_value(self):
        state = LeverageTokenState(
            collateral_amount=2 * WAD, debt_amount=WAD, total_shares=WAD, timestamp=10
        )
        evolved = state.evolve(debt_amount=0, timestamp=20)

        assert evolved.debt_amount == 0
        assert evolved.timestamp == 20
        assert state.debt_amount == WAD
        assert state.timestamp == 10

    def test_float_views(self):
        state = LeverageTokenState(
            collateral_amount=17 * WAD, debt_amount=16 * WAD, total_shares=WAD, timestamp=0
        )
        assert state.collateral == 17.0
        assert state.debt == 16.0
        assert state.shares == 1.0

    def test_dict_keeps_amounts_exact(self):
        state = LeverageTokenState(
            collateral_amount=17 * WAD + 3, debt_amount=16 * WAD, total_shares=WAD, timestamp=5
        )
        data = state.to_dict()

        assert data["collateral_amount"] == "17000000000000000003"
        assert LeverageTokenState.from_dict(data) == state


class TestCollateralRatioConfig:
    """Tests for CollateralRatioConfig."""

    def test_ordering_enforced(self):
        with pytest.raises(ValueError):
            CollateralRatioConfig(min=2.0, target=1.5, max=2.5, pre_liquidation_threshold=1.4)
        with pytest.raises(ValueError):
            CollateralRatioConfig(min=1.5, target=2.0, max=2.5, pre_liquidation_threshold=1.6)

    def test_target_above_one(self):
        with pytest.raises(ValueError):
            CollateralRatioConfig(min=0.8, target=0.9, max=1.1, pre_liquidation_threshold=0.7)

    def test_bounds_inclusive(self, ratio_config):
        assert ratio_config.is_in_bounds(1.5)
        assert ratio_config.is_in_bounds(2.5)
        assert not ratio_config.is_in_bounds(1.49)
        assert not ratio_config.is_in_bounds(2.51)

    def test_target_leverage(self, ratio_config):
        assert ratio_config.target_leverage == pytest.approx(2.0)

    def test_preset_leverage(self):
        strategy = get_strategy("WEETH-WETH-17x")
        assert strategy.target_leverage == pytest.approx(17.0)


class TestMarketPrices:
    """Tests for MarketPrices."""

    def test_collateral_in_debt(self):
        prices = MarketPrices(collateral_price_usd=3300.0, debt_price_usd=3000.0, timestamp=0)
        assert prices.collateral_in_debt == pytest.approx(1.1)

    def test_zero_debt_price(self):
        prices = MarketPrices(collateral_price_usd=1.0, debt_price_usd=0.0, timestamp=0)
        assert prices.collateral_in_debt == 0.0


class TestAuctionModels:
    """Tests for auction configuration and pending auction values."""

    def test_defaults(self):
        config = AuctionConfig()
        assert config.min_notice_time == 600
        assert config.max_notice_time == 3600
        assert config.avg_auction_duration == 2400
        assert config.auction_duration_std_dev == 1200
        assert config.auction_creation_probability == 0.05
        assert config.emergency_threshold == 1.06061
        assert config.emergency_rebalance_time == 600

    def test_invalid_probability(self):
        with pytest.raises(ValueError):
            AuctionConfig(auction_creation_probability=1.5)

    def test_invalid_notice_window(self):
        with pytest.raises(ValueError):
            AuctionConfig(min_notice_time=100, max_notice_time=50)

    def test_pending_auction_variants(self):
        assert not NO_AUCTION.is_scheduled

        auction = ScheduledAuction(
            created_at=100,
            execute_at=250.5,
            direction=RebalanceDirection.UP,
            is_emergency=False,
        )
        assert auction.is_scheduled
        assert not auction.is_due(250)
        assert auction.is_due(251)


class TestStrategyModels:
    """Tests for strategy configuration."""

    def test_time_range_validation(self):
        with pytest.raises(ValueError):
            TimeRange(start=10, end=5)

        window = TimeRange(start=10, end=20)
        assert window.contains(10)
        assert window.contains(20)
        assert not window.contains(21)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="Unknown strategy"):
            get_strategy("NOPE")

    def test_presets_registered(self):
        assert "WEETH-WETH-17x" in STRATEGIES
        strategy = STRATEGIES["WEETH-WETH-17x"]
        assert strategy.collateral.symbol == "weETH"
        assert strategy.debt.symbol == "ETH"
        assert strategy.collateral_ratios.pre_liquidation_threshold == 1.06061

    def test_apy_series_name(self, test_strategy):
        assert test_strategy.apy_series_name == "TEST-2x-BORROW-APY"

        market = LendingMarketConfig(market_id="0xabcdef0123456789")
        assert market.apy_series_name == "MORPHO-0xabcdef01"

    def test_strategy_dict(self, test_strategy):
        restored = StrategyConfig.from_dict(test_strategy.to_dict())
        assert restored == test_strategy

    def test_backtest_config_validation(self, test_strategy):
        with pytest.raises(ValueError):
            BacktestConfig(strategy=test_strategy, initial_deposit_collateral=0)
        with pytest.raises(ValueError):
            BacktestConfig(strategy=test_strategy, estimated_rebalance_gas_cost=-1)
        with pytest.raises(ValueError):
            BacktestConfig(strategy=test_strategy, management_fee_percentage=-0.01)


class TestResultModels:
    """Tests for result records."""

    def test_period_duration(self):
        period = BacktestPeriod(start=0, end=86400 * 2)
        assert period.duration_days == 2.0

    def test_infinite_ratio_serialization(self):
        state = LeverageTokenState(
            collateral_amount=WAD, debt_amount=0, total_shares=WAD, timestamp=0
        )
        result = RebalanceResult(
            state_before=state,
            state_after=state,
            direction=RebalanceDirection.UP,
            ratio_before=float("inf"),
            ratio_after=2.0,
            estimated_gas_cost_usd=5.0,
        )

        data = result.to_dict()
        assert data["ratio_before"] == "inf"
        assert RebalanceResult.from_dict(data).ratio_before == float("inf")


class TestAssetData:
    """Tests for AssetData series."""

    def test_rejects_unsorted_points(self):
        with pytest.raises(ValueError):
            AssetData(
                symbol="ETH",
                source="test",
                timeframe="5m",
                data=[PricePoint(200, 1.0), PricePoint(100, 1.0)],
            )

    def test_rejects_duplicate_timestamps(self):
        with pytest.raises(ValueError):
            AssetData(
                symbol="ETH",
                source="test",
                timeframe="5m",
                data=[PricePoint(100, 1.0), PricePoint(100, 2.0)],
            )

    def test_lookups(self, make_series):
        series = make_series("ETH", [(100, 1.0), (200, 2.0), (300, 3.0)])

        assert series.timestamps == [100, 200, 300]
        assert series.first_at_or_after(150).price == 2.0
        assert series.first_at_or_after(400) is None
        assert [p.timestamp for p in series.filter_by_time_range(150, 300)] == [200, 300]

    def test_dict(self, make_series):
        series = make_series("ETH", [(100, 1.0), (200, 2.0)])
        assert AssetData.from_dict(series.to_dict()) == series
