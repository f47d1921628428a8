"""Fixed-point helpers for WAD-scaled token amounts.

Token amounts (collateral, debt, shares) are stored as integers scaled by
1e18. Every multiply/divide on them goes through a dedicated Decimal context
and is floored back to an integer, so amounts never pass through a float.
"""

from decimal import Context, Decimal, ROUND_FLOOR, localcontext
from typing import Any

from src.core.constants import WAD, FIXED_POINT_PRECISION

FIXED_POINT_CONTEXT = Context(prec=FIXED_POINT_PRECISION, rounding=ROUND_FLOOR)


class FixedPoint:
    """Conversions between human values and WAD-scaled integers."""

    @staticmethod
    def to_decimal(value: Any) -> Decimal:
        """Safely parse a value to Decimal."""
        if value is None:
            return Decimal("0")
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))

    @staticmethod
    def floor(value: Decimal) -> int:
        """Round a Decimal down to the nearest integer."""
        with localcontext(FIXED_POINT_CONTEXT):
            return int(value.to_integral_value(rounding=ROUND_FLOOR))

    @classmethod
    def to_wad(cls, value: Any) -> int:
        """Convert a token quantity (e.g. 1.5) to its WAD integer, floored.

        Example: 1.5 -> 1500000000000000000
        """
        with localcontext(FIXED_POINT_CONTEXT):
            return cls.floor(cls.to_decimal(value) * WAD)

    @staticmethod
    def from_wad(amount: int) -> Decimal:
        """Convert a WAD integer back to a token quantity."""
        with localcontext(FIXED_POINT_CONTEXT):
            return Decimal(amount) / Decimal(WAD)

    @classmethod
    def mul_floor(cls, amount: int, factor: Any) -> int:
        """Multiply a WAD amount by a factor and floor the result."""
        with localcontext(FIXED_POINT_CONTEXT):
            return cls.floor(Decimal(amount) * cls.to_decimal(factor))

    @classmethod
    def to_float(cls, amount: int) -> float:
        """Token quantity as a float, for ratios and reporting only."""
        return float(cls.from_wad(amount))
