"""Merging of independently sampled series into one timeline."""

from dataclasses import dataclass
from typing import Dict, List, Sequence

from src.core.models import PricePoint
from src.backtest.models import BorrowRate, MarketPrices


@dataclass(frozen=True)
class TimelinePoint:
    """Synchronized market state at one timestamp."""

    timestamp: int
    debt_price: float
    collateral_price: float
    borrow_apy: float

    @property
    def prices(self) -> MarketPrices:
        return MarketPrices(
            collateral_price_usd=self.collateral_price,
            debt_price_usd=self.debt_price,
            timestamp=self.timestamp,
        )

    @property
    def borrow_rate(self) -> BorrowRate:
        return BorrowRate(apy=self.borrow_apy, timestamp=self.timestamp)

    @property
    def has_prices(self) -> bool:
        """Whether both prices have been observed by this point."""
        return self.debt_price > 0 and self.collateral_price > 0


def merge_timelines(
    debt_prices: Sequence[PricePoint],
    collateral_prices: Sequence[PricePoint],
    apy_data: Sequence[PricePoint],
) -> List[TimelinePoint]:
    """
    Merge three series into a single ascending timeline.

    Every timestamp present in any series appears once. A series without
    an observation at a timestamp carries its last observed value forward,
    or 0 if it has not been observed yet.
    """
    debt_map: Dict[int, float] = {p.timestamp: p.price for p in debt_prices}
    collateral_map: Dict[int, float] = {p.timestamp: p.price for p in collateral_prices}
    apy_map: Dict[int, float] = {p.timestamp: p.price for p in apy_data}

    all_timestamps = sorted(set(debt_map) | set(collateral_map) | set(apy_map))

    last_debt_price = 0.0
    last_collateral_price = 0.0
    last_apy = 0.0

    timeline = []
    for timestamp in all_timestamps:
        last_debt_price = debt_map.get(timestamp, last_debt_price)
        last_collateral_price = collateral_map.get(timestamp, last_collateral_price)
        last_apy = apy_map.get(timestamp, last_apy)

        timeline.append(
            TimelinePoint(
                timestamp=timestamp,
                debt_price=last_debt_price,
                collateral_price=last_collateral_price,
                borrow_apy=last_apy,
            )
        )

    return timeline
