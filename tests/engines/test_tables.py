"""
Tests for the solidarity, withholding and risk-premium table lookups.
"""

from decimal import Decimal

import pytest

from payroll_engines.tables import (
    risk_premium_rate,
    solidarity_rate,
    withholding_retention_uvt,
)
from payroll_kernel.domain import RiskTier


class TestSolidarityRate:
    """Tier boundaries are lower-inclusive."""

    @pytest.mark.parametrize(
        "multiple,expected",
        [
            ("1", "0"),
            ("3.99", "0"),
            ("4", "0.01"),
            ("15.99", "0.01"),
            ("16", "0.012"),
            ("17", "0.014"),
            ("18.5", "0.016"),
            ("19", "0.018"),
            ("20", "0.02"),
            ("25", "0.02"),
        ],
    )
    def test_tiers(self, constants, multiple, expected):
        ibc = constants.wages(Decimal(multiple))
        assert solidarity_rate(ibc, constants) == Decimal(expected)

    def test_one_peso_below_boundary(self, constants):
        ibc = constants.wages(4) - 1
        assert solidarity_rate(ibc, constants) == Decimal("0")


class TestWithholdingRetention:
    """Bands are lower-exclusive and upper-inclusive."""

    @pytest.mark.parametrize(
        "base_uvt,expected",
        [
            ("0", "0"),
            ("-5", "0"),
            ("50", "0"),
            ("95", "0"),
            ("96", "0.19"),
            ("150", "10.45"),
            ("200", "24"),
            ("400", "82.2"),
            ("1000", "288.35"),
            ("2400", "809"),
        ],
    )
    def test_retention(self, constants, base_uvt, expected):
        assert withholding_retention_uvt(Decimal(base_uvt), constants) == Decimal(expected)

    @pytest.mark.parametrize("lower,upper", [(95, 150), (150, 360), (360, 640), (640, 945)])
    def test_monotonic_within_each_band(self, constants, lower, upper):
        points = [Decimal(lower) + Decimal(step) for step in range(1, upper - lower + 1, 7)]
        values = [withholding_retention_uvt(p, constants) for p in points]
        assert values == sorted(values)


class TestRiskPremium:

    def test_every_tier_has_a_rate(self, constants):
        rates = [risk_premium_rate(tier, constants) for tier in RiskTier]
        assert rates == sorted(rates)
        assert rates[0] == Decimal("0.00522")
        assert rates[-1] == Decimal("0.06960")
