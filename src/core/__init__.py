"""Core module - constants and fixed-point helpers."""

from .constants import SECONDS_PER_DAY, SECONDS_PER_YEAR, WAD
from .fixed_point import FixedPoint

__all__ = [
    "FixedPoint",
    "SECONDS_PER_DAY",
    "SECONDS_PER_YEAR",
    "WAD",
]
