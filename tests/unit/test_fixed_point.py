"""Unit tests for fixed-point helpers."""

from decimal import Decimal

from src.core.constants import SECONDS_PER_DAY, SECONDS_PER_YEAR, WAD
from src.core.fixed_point import FixedPoint


class TestConstants:
    """Tests for shared constants."""

    def test_year_is_julian(self):
        assert SECONDS_PER_DAY == 86400
        assert SECONDS_PER_YEAR == 365.25 * 86400

    def test_wad(self):
        assert WAD == 10**18


class TestFixedPoint:
    """Tests for WAD conversions."""

    def test_to_decimal(self):
        assert FixedPoint.to_decimal(None) == Decimal("0")
        assert FixedPoint.to_decimal(0.1) == Decimal("0.1")
        assert FixedPoint.to_decimal("2.5") == Decimal("2.5")
        value = Decimal("1.23")
        assert FixedPoint.to_decimal(value) is value

    def test_to_wad(self):
        assert FixedPoint.to_wad(1) == WAD
        assert FixedPoint.to_wad(1.5) == 1_500_000_000_000_000_000
        assert FixedPoint.to_wad(0.1) == 100_000_000_000_000_000

    def test_to_wad_floors_below_one_wei(self):
        assert FixedPoint.to_wad(Decimal("1.0000000000000000009")) == WAD

    def test_from_wad(self):
        assert FixedPoint.from_wad(WAD) == Decimal(1)
        assert FixedPoint.from_wad(WAD // 4) == Decimal("0.25")

    def test_floor(self):
        assert FixedPoint.floor(Decimal("2.999")) == 2
        assert FixedPoint.floor(Decimal("-0.5")) == -1
        assert FixedPoint.floor(Decimal("7")) == 7

    def test_mul_floor(self):
        assert FixedPoint.mul_floor(10, Decimal("0.15")) == 1
        assert FixedPoint.mul_floor(WAD, 2) == 2 * WAD
        assert FixedPoint.mul_floor(3 * WAD, Decimal(1) / Decimal(3)) == WAD - 1

    def test_to_float(self):
        assert FixedPoint.to_float(2 * WAD) == 2.0
        assert FixedPoint.to_float(0) == 0.0

    def test_large_amounts_stay_exact(self):
        amount = 123_456_789 * WAD + 1
        assert FixedPoint.mul_floor(amount, 1) == amount
