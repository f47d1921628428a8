"""Simulation engine components."""

from .random_source import RandomSource, NumpyRandomSource
from .auction import AuctionSimulator
from .simulation import SimulationConfig, SimulationEngine
from .backtester import Backtester

__all__ = [
    "RandomSource",
    "NumpyRandomSource",
    "AuctionSimulator",
    "SimulationConfig",
    "SimulationEngine",
    "Backtester",
]
