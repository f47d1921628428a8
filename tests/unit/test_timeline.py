"""Unit tests for timeline merging."""

from src.core.models import PricePoint
from src.backtest.data import merge_timelines


def _points(*pairs):
    return [PricePoint(timestamp=ts, price=value) for ts, value in pairs]


class TestMergeTimelines:
    """Tests for merge_timelines."""

    def test_union_of_timestamps(self):
        timeline = merge_timelines(
            _points((100, 1.0), (300, 1.1)),
            _points((200, 2.0)),
            _points((100, 0.03), (400, 0.04)),
        )

        assert [p.timestamp for p in timeline] == [100, 200, 300, 400]

    def test_forward_fill(self):
        timeline = merge_timelines(
            _points((100, 3000.0), (300, 3100.0)),
            _points((100, 3200.0), (200, 3250.0)),
            _points((100, 0.025)),
        )

        debt = [p.debt_price for p in timeline]
        collateral = [p.collateral_price for p in timeline]
        apy = [p.borrow_apy for p in timeline]

        assert debt == [3000.0, 3000.0, 3100.0]
        assert collateral == [3200.0, 3250.0, 3250.0]
        assert apy == [0.025, 0.025, 0.025]

    def test_unobserved_values_are_zero(self):
        timeline = merge_timelines(
            _points((200, 1.0)),
            _points((100, 2.0)),
            _points((300, 0.05)),
        )

        first = timeline[0]
        assert first.debt_price == 0.0
        assert first.borrow_apy == 0.0
        assert not first.has_prices
        assert timeline[1].has_prices
        assert timeline[1].borrow_apy == 0.0

    def test_each_value_is_latest_observation(self):
        debt = _points((100, 1.0), (250, 2.0), (400, 3.0))
        collateral = _points((150, 10.0), (350, 20.0))
        apy = _points((100, 0.01), (300, 0.02))

        for point in merge_timelines(debt, collateral, apy):
            for series, value in (
                (debt, point.debt_price),
                (collateral, point.collateral_price),
                (apy, point.borrow_apy),
            ):
                observed = [p.price for p in series if p.timestamp <= point.timestamp]
                assert value == (observed[-1] if observed else 0.0)

    def test_empty_inputs(self):
        assert merge_timelines([], [], []) == []

    def test_point_views(self):
        point = merge_timelines(
            _points((100, 3000.0)), _points((100, 3300.0)), _points((100, 0.02))
        )[0]

        assert point.prices.collateral_price_usd == 3300.0
        assert point.prices.debt_price_usd == 3000.0
        assert point.prices.timestamp == 100
        assert point.borrow_rate.apy == 0.02
        assert point.borrow_rate.timestamp == 100
