"""Strategy configuration models and presets."""

from dataclasses import dataclass, field
from typing import Dict, Optional

from .state import CollateralRatioConfig


@dataclass(frozen=True)
class TimeRange:
    """Inclusive time window in Unix seconds."""

    start: int
    end: int

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Time range ends before it starts: {self.start} > {self.end}")

    def contains(self, timestamp: int) -> bool:
        return self.start <= timestamp <= self.end

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: dict) -> "TimeRange":
        return cls(start=int(data["start"]), end=int(data["end"]))


@dataclass(frozen=True)
class TokenConfig:
    """A token used by a strategy."""

    symbol: str
    adapter: str = "binance"        # Data source used to fetch its prices
    chain: Optional[str] = None
    address: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "adapter": self.adapter,
            "chain": self.chain,
            "address": self.address,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TokenConfig":
        return cls(
            symbol=data["symbol"],
            adapter=data.get("adapter", "binance"),
            chain=data.get("chain"),
            address=data.get("address"),
        )


@dataclass(frozen=True)
class LendingMarketConfig:
    """Lending market providing the borrow rate."""

    market_id: str
    adapter: str = "morpho"
    chain_id: int = 1

    @property
    def apy_series_name(self) -> str:
        """Name of the stored APY series, e.g. MORPHO-0x1234abcd."""
        return f"{self.adapter.upper()}-{self.market_id[:10]}"

    def to_dict(self) -> dict:
        return {"market_id": self.market_id, "adapter": self.adapter, "chain_id": self.chain_id}

    @classmethod
    def from_dict(cls, data: dict) -> "LendingMarketConfig":
        return cls(
            market_id=data["market_id"],
            adapter=data.get("adapter", "morpho"),
            chain_id=int(data.get("chain_id", 1)),
        )


@dataclass
class StrategyConfig:
    """
    Configuration of a leverage token strategy.

    Defines the asset pair, the collateral ratio policy and the time windows
    for data and for the backtest itself.
    """

    name: str                       # e.g. "WEETH-WETH-17x"
    collateral: TokenConfig
    debt: TokenConfig
    leverage: float                 # Nominal leverage multiplier, e.g. 17
    collateral_ratios: CollateralRatioConfig
    time_range_data: TimeRange
    time_range_backtest: TimeRange
    lending_market: Optional[LendingMarketConfig] = None

    @property
    def target_leverage(self) -> float:
        """Leverage implied by the target collateral ratio."""
        return self.collateral_ratios.target_leverage

    @property
    def apy_series_name(self) -> str:
        """Name of the borrow APY series this strategy reads."""
        if self.lending_market is not None:
            return self.lending_market.apy_series_name
        return f"{self.name}-BORROW-APY"

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "collateral": self.collateral.to_dict(),
            "debt": self.debt.to_dict(),
            "leverage": self.leverage,
            "collateral_ratios": self.collateral_ratios.to_dict(),
            "time_range_data": self.time_range_data.to_dict(),
            "time_range_backtest": self.time_range_backtest.to_dict(),
            "lending_market": self.lending_market.to_dict() if self.lending_market else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StrategyConfig":
        """Deserialize from dictionary."""
        return cls(
            name=data["name"],
            collateral=TokenConfig.from_dict(data["collateral"]),
            debt=TokenConfig.from_dict(data["debt"]),
            leverage=float(data["leverage"]),
            collateral_ratios=CollateralRatioConfig.from_dict(data["collateral_ratios"]),
            time_range_data=TimeRange.from_dict(data["time_range_data"]),
            time_range_backtest=TimeRange.from_dict(data["time_range_backtest"]),
            lending_market=(
                LendingMarketConfig.from_dict(data["lending_market"])
                if data.get("lending_market")
                else None
            ),
        )


@dataclass
class BacktestConfig:
    """Parameters of a single backtest run."""

    strategy: StrategyConfig
    initial_deposit_collateral: float = 1.0     # In collateral tokens, e.g. 1 weETH
    estimated_rebalance_gas_cost: float = 5.0   # USD per rebalance
    management_fee_percentage: float = 0.0      # Annual, e.g. 0.02 = 2%
    parameters: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.initial_deposit_collateral <= 0:
            raise ValueError(
                f"Initial deposit must be positive, got {self.initial_deposit_collateral}"
            )
        if self.estimated_rebalance_gas_cost < 0:
            raise ValueError("Estimated rebalance gas cost cannot be negative")
        if self.management_fee_percentage < 0:
            raise ValueError("Management fee cannot be negative")


# Jan 1st 2025 -> Sep 30th 2025 (UTC)
_RANGE_2025 = TimeRange(start=1735689600, end=1759190400)

STRATEGIES: Dict[str, StrategyConfig] = {
    "WEETH-WETH-17x": StrategyConfig(
        name="WEETH-WETH-17x",
        collateral=TokenConfig(
            symbol="weETH",
            adapter="defillama",
            chain="ethereum",
            address="0xCd5fE23C85820F7B72D0926FC9b05b43E359b7ee",
        ),
        debt=TokenConfig(symbol="ETH", adapter="binance"),
        leverage=17,
        collateral_ratios=CollateralRatioConfig(
            min=1.06135,                        # 94.2% LTV
            target=1.0625,                      # 94.1% LTV
            max=1.062893082,                    # 94.08% LTV
            pre_liquidation_threshold=1.06061,  # 94.28% LTV
        ),
        time_range_data=_RANGE_2025,
        time_range_backtest=_RANGE_2025,
    ),
}


def get_strategy(name: str) -> StrategyConfig:
    """Look up a predefined strategy by name."""
    if name not in STRATEGIES:
        raise ValueError(f"Unknown strategy: {name}. Available: {', '.join(STRATEGIES)}")
    return STRATEGIES[name]
