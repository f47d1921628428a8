"""Loading of stored historical series for backtests."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from src.core.models import AssetData
from src.backtest.models import StrategyConfig

logger = logging.getLogger(__name__)


@dataclass
class HistoricalData:
    """The three series a backtest consumes."""

    debt_prices: AssetData          # e.g. ETH in USD
    collateral_prices: AssetData    # e.g. weETH in USD
    borrow_apy: AssetData           # Lending market borrow APY


class HistoricalDataLoader:
    """
    Reads series previously saved by the data extraction layer.

    Each series lives in ``<data_dir>/<symbol>.json`` as
    ``{"symbol", "source", "timeframe", "data": [{"timestamp", "price"}]}``.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)

    def path_for(self, symbol: str) -> Path:
        return self.data_dir / f"{symbol}.json"

    def load_asset(self, symbol: str) -> AssetData:
        """
        Load one series.

        Raises:
            FileNotFoundError: If the series was never extracted
            ValueError: If its timestamps are not strictly ascending
        """
        file_path = self.path_for(symbol)
        if not file_path.exists():
            raise FileNotFoundError(f"No data file for {symbol}: {file_path}")

        with open(file_path, "r") as f:
            data = json.load(f)

        asset = AssetData.from_dict(data)
        logger.info(f"Loaded {symbol}: {len(asset.data)} points from {file_path}")
        return asset

    def load_for_strategy(self, strategy: StrategyConfig) -> HistoricalData:
        """Load the debt, collateral and borrow APY series of a strategy."""
        return HistoricalData(
            debt_prices=self.load_asset(strategy.debt.symbol),
            collateral_prices=self.load_asset(strategy.collateral.symbol),
            borrow_apy=self.load_asset(strategy.apy_series_name),
        )
