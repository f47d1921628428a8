"""Core data models for historical series."""

from .timeseries import AssetData, PricePoint

__all__ = [
    "AssetData",
    "PricePoint",
]
