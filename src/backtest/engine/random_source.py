"""Injectable randomness for the auction simulator."""

from typing import Optional, Protocol

import numpy as np


class RandomSource(Protocol):
    """Source of the draws used by the auction timing model."""

    def random(self) -> float:
        """Uniform draw in [0, 1)."""
        ...

    def uniform(self, low: float, high: float) -> float:
        """Uniform draw in [low, high)."""
        ...

    def normal(self, mean: float, std_dev: float) -> float:
        """Draw from N(mean, std_dev)."""
        ...


class NumpyRandomSource:
    """
    RandomSource backed by a numpy Generator.

    A fixed seed reproduces the exact same sequence of draws, and therefore
    the same auctions, across runs.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def random(self) -> float:
        return float(self._rng.random())

    def uniform(self, low: float, high: float) -> float:
        return float(self._rng.uniform(low, high))

    def normal(self, mean: float, std_dev: float) -> float:
        return float(self._rng.normal(mean, std_dev))
