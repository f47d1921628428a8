"""Pydantic settings for the leverage token backtester."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.backtest.engine import NumpyRandomSource
from src.backtest.models import AuctionConfig, BacktestConfig, StrategyConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    data_dir: Path = Field(default=Path("data"), description="Directory of extracted series")
    results_dir: Path = Field(default=Path("results"), description="Directory for saved results")

    # Position
    initial_deposit_collateral: float = Field(
        default=1.0, gt=0, description="Initial deposit in collateral tokens"
    )
    estimated_rebalance_gas_cost: float = Field(
        default=5.0, ge=0, description="Estimated gas cost per rebalance in USD"
    )
    management_fee_percentage: float = Field(
        default=0.02, ge=0.0, le=1.0, description="Annual management fee (0.02 = 2%)"
    )

    # Auction timing (seconds; probability is per timeline tick)
    min_notice_time: float = Field(default=600, ge=0)
    max_notice_time: float = Field(default=3600, ge=0)
    avg_auction_duration: float = Field(default=2400, ge=0)
    auction_duration_std_dev: float = Field(default=1200, ge=0)
    auction_creation_probability: float = Field(default=0.05, ge=0.0, le=1.0)
    emergency_rebalance_time: float = Field(default=600, ge=0)

    # Reproducibility
    random_seed: Optional[int] = Field(default=None, description="Seed for auction randomness")

    # Logging
    log_level: str = Field(default="WARNING", description="Root logging level")

    @field_validator("data_dir", "results_dir", mode="before")
    @classmethod
    def parse_dir(cls, v):
        """Convert string to Path."""
        if isinstance(v, str):
            return Path(v)
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def parse_log_level(cls, v):
        """Normalize and check the logging level name."""
        level = str(v).upper()
        if level not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @model_validator(mode="after")
    def check_notice_window(self):
        if self.min_notice_time > self.max_notice_time:
            raise ValueError("min_notice_time cannot exceed max_notice_time")
        return self

    def auction_config(self) -> AuctionConfig:
        """Auction timing parameters.

        The emergency threshold is set per strategy by the engine.
        """
        return AuctionConfig(
            min_notice_time=self.min_notice_time,
            max_notice_time=self.max_notice_time,
            avg_auction_duration=self.avg_auction_duration,
            auction_duration_std_dev=self.auction_duration_std_dev,
            auction_creation_probability=self.auction_creation_probability,
            emergency_rebalance_time=self.emergency_rebalance_time,
        )

    def backtest_config(self, strategy: StrategyConfig) -> BacktestConfig:
        """Backtest configuration for a strategy using these settings."""
        return BacktestConfig(
            strategy=strategy,
            initial_deposit_collateral=self.initial_deposit_collateral,
            estimated_rebalance_gas_cost=self.estimated_rebalance_gas_cost,
            management_fee_percentage=self.management_fee_percentage,
        )

    def random_source(self) -> NumpyRandomSource:
        """Random source seeded with ``random_seed``."""
        return NumpyRandomSource(self.random_seed)

    def ensure_results_dir(self) -> Path:
        """Ensure results directory exists and return it."""
        self.results_dir.mkdir(parents=True, exist_ok=True)
        return self.results_dir


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging at the level from settings."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
