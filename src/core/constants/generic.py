"""Generic constants for leverage token calculations.

These constants are protocol-agnostic and shared by the simulation engine
and the backtest driver.
"""

# Time constants
SECONDS_PER_DAY = 24 * 3600
SECONDS_PER_YEAR = 365.25 * SECONDS_PER_DAY  # ~31,557,600

# Precision constants
WAD = 10**18  # Standard 18 decimal precision for token amounts
FIXED_POINT_PRECISION = 78  # Enough digits for any uint256 value
