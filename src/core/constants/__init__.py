"""Core constants module."""

from src.core.constants.generic import (
    SECONDS_PER_DAY,
    SECONDS_PER_YEAR,
    WAD,
    FIXED_POINT_PRECISION,
)

__all__ = [
    "SECONDS_PER_DAY",
    "SECONDS_PER_YEAR",
    "WAD",
    "FIXED_POINT_PRECISION",
]
