"""Strategy and backtest result storage."""

import json
import logging
import re
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from src.backtest.models import BacktestResult, StrategyConfig

logger = logging.getLogger(__name__)


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal and datetime types."""

    def default(self, obj):
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


def _safe_name(name: str) -> str:
    """Filesystem-safe version of a strategy name."""
    return re.sub(r"[^A-Za-z0-9]+", "_", name).strip("_") or "strategy"


class ResultStorage:
    """
    Persistent storage for strategy configurations and backtest results.

    Uses JSON files for simplicity and human-readability. Token amounts are
    written as exact decimal strings, never as JSON numbers.

    Directory structure:
        storage_dir/
            strategies/
                {strategy_name}.json
            results/
                {strategy_name}/
                    {result_id}.json
    """

    def __init__(self, storage_dir: Optional[Union[str, Path]] = None):
        """
        Initialize storage.

        Args:
            storage_dir: Base directory for storage (default: ~/.leverage_backtests)
        """
        if storage_dir is None:
            storage_dir = Path.home() / ".leverage_backtests"

        self.storage_dir = Path(storage_dir)
        self.strategies_dir = self.storage_dir / "strategies"
        self.results_dir = self.storage_dir / "results"

        self.strategies_dir.mkdir(parents=True, exist_ok=True)
        self.results_dir.mkdir(parents=True, exist_ok=True)

    # Strategy configuration methods

    def save_strategy(self, config: StrategyConfig) -> str:
        """Save a strategy configuration; returns its storage ID."""
        strategy_id = _safe_name(config.name)
        file_path = self.strategies_dir / f"{strategy_id}.json"

        data = config.to_dict()
        data["_id"] = strategy_id
        data["_saved_at"] = datetime.now(timezone.utc).isoformat()

        with open(file_path, "w") as f:
            json.dump(data, f, cls=DecimalEncoder, indent=2)

        logger.info(f"Saved strategy: {strategy_id}")
        return strategy_id

    def load_strategy(self, strategy_id: str) -> Optional[StrategyConfig]:
        """Load a strategy configuration, or None if not found."""
        file_path = self.strategies_dir / f"{strategy_id}.json"

        if not file_path.exists():
            logger.warning(f"Strategy not found: {strategy_id}")
            return None

        with open(file_path, "r") as f:
            data = json.load(f)

        data.pop("_id", None)
        data.pop("_saved_at", None)

        return StrategyConfig.from_dict(data)

    # Backtest result methods

    def save_result(self, result: BacktestResult, result_id: Optional[str] = None) -> str:
        """
        Save a backtest result.

        Args:
            result: Result to save
            result_id: Optional custom ID (default: creation timestamp)

        Returns:
            Result ID
        """
        if result_id is None:
            created_at = result.created_at or datetime.now(timezone.utc)
            result_id = created_at.strftime("%Y%m%d_%H%M%S_%f")

        strategy_id = _safe_name(result.strategy_name)
        result_dir = self.results_dir / strategy_id
        result_dir.mkdir(parents=True, exist_ok=True)

        file_path = result_dir / f"{result_id}.json"

        data = result.to_dict()
        data["_id"] = result_id

        with open(file_path, "w") as f:
            json.dump(data, f, cls=DecimalEncoder, indent=2)

        logger.info(f"Saved result: {strategy_id}/{result_id}")
        return result_id

    def load_result(self, strategy_name: str, result_id: str) -> Optional[BacktestResult]:
        """Load a backtest result, or None if not found."""
        file_path = self.results_dir / _safe_name(strategy_name) / f"{result_id}.json"

        if not file_path.exists():
            logger.warning(f"Result not found: {strategy_name}/{result_id}")
            return None

        with open(file_path, "r") as f:
            data = json.load(f)

        data.pop("_id", None)
        return BacktestResult.from_dict(data)

    def list_results(self, strategy_name: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List stored results, newest first.

        Args:
            strategy_name: Restrict to one strategy (default: all)

        Returns:
            List of result summaries
        """
        if strategy_name is not None:
            directories = [self.results_dir / _safe_name(strategy_name)]
        else:
            directories = [d for d in self.results_dir.iterdir() if d.is_dir()]

        results = []
        for directory in directories:
            if not directory.exists():
                continue
            for file_path in directory.glob("*.json"):
                with open(file_path, "r") as f:
                    data = json.load(f)

                metrics = data.get("metrics", {})
                results.append({
                    "id": data.get("_id", file_path.stem),
                    "strategy_name": data.get("strategy_name"),
                    "period": data.get("period"),
                    "created_at": data.get("created_at") or "",
                    "total_return": metrics.get("total_return"),
                    "max_drawdown": metrics.get("max_drawdown"),
                    "rebalance_count": metrics.get("rebalance_count"),
                })

        results.sort(key=lambda x: x["created_at"], reverse=True)
        return results

    def delete_result(self, strategy_name: str, result_id: str) -> bool:
        """Delete a backtest result; returns False if it did not exist."""
        file_path = self.results_dir / _safe_name(strategy_name) / f"{result_id}.json"

        if file_path.exists():
            file_path.unlink()
            logger.info(f"Deleted result: {strategy_name}/{result_id}")
            return True

        return False
