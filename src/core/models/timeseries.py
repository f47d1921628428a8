"""Timeseries data models for historical price and rate data."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional


@dataclass(frozen=True)
class PricePoint:
    """A single observation in a price or rate series.

    For APY series the ``price`` field carries the rate as a decimal
    (e.g. 0.025 for 2.5%).
    """

    timestamp: int  # Unix seconds
    price: float

    @property
    def as_datetime(self) -> datetime:
        """Timestamp as an aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)

    def to_dict(self) -> dict:
        return {"timestamp": self.timestamp, "price": self.price}

    @classmethod
    def from_dict(cls, data: dict) -> "PricePoint":
        return cls(timestamp=int(data["timestamp"]), price=float(data["price"]))


@dataclass
class AssetData:
    """A complete series for one asset as supplied by the data layer.

    Points are ascending by timestamp with no duplicates. Gaps are filled
    upstream; sparse sampling relative to other series is fine.
    """

    symbol: str
    source: str                     # e.g. "binance", "defillama", "morpho"
    timeframe: str                  # Nominal sampling interval, e.g. "5m", "1d"
    data: List[PricePoint] = field(default_factory=list)

    def __post_init__(self):
        for previous, current in zip(self.data, self.data[1:]):
            if current.timestamp <= previous.timestamp:
                raise ValueError(
                    f"{self.symbol}: timestamps must be strictly ascending "
                    f"({previous.timestamp} followed by {current.timestamp})"
                )

    @property
    def timestamps(self) -> List[int]:
        """Extract timestamps from points."""
        return [p.timestamp for p in self.data]

    def first_at_or_after(self, timestamp: int) -> Optional[PricePoint]:
        """First point whose timestamp is >= the given one, if any."""
        for point in self.data:
            if point.timestamp >= timestamp:
                return point
        return None

    def filter_by_time_range(self, start: int, end: int) -> List[PricePoint]:
        """Points with start <= timestamp <= end."""
        return [p for p in self.data if start <= p.timestamp <= end]

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "symbol": self.symbol,
            "source": self.source,
            "timeframe": self.timeframe,
            "data": [p.to_dict() for p in self.data],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AssetData":
        """Deserialize from dictionary."""
        return cls(
            symbol=data["symbol"],
            source=data.get("source", ""),
            timeframe=data.get("timeframe", ""),
            data=[PricePoint.from_dict(p) for p in data.get("data", [])],
        )
