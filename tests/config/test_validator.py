"""
Tests for structural validation of statutory constants.
"""

from dataclasses import replace
from decimal import Decimal

from payroll_config import validate_constants
from payroll_config.schema import SolidarityTier, WithholdingBracket
from payroll_kernel.domain import RiskTier


class TestShippedSet:

    def test_valid_with_bracket_step_warnings(self, constants):
        result = validate_constants(constants)

        assert result.is_valid
        assert result.errors == []
        assert any("bracket step at 150" in w for w in result.warnings)


class TestHeadlineAmounts:

    def test_zero_transport_subsidy(self, constants):
        result = validate_constants(replace(constants, transport_subsidy=Decimal("0")))

        assert not result.is_valid
        assert "transport_subsidy must be > 0, got 0" in result.errors

    def test_missing_jurisdiction(self, constants):
        result = validate_constants(replace(constants, jurisdiction=""))
        assert "jurisdiction is required" in result.errors

    def test_rate_above_one(self, constants):
        rates = replace(constants.rates, employer_pension=Decimal("12"))
        result = validate_constants(replace(constants, rates=rates))

        assert any("rates.employer_pension must be a fraction" in e for e in result.errors)


class TestContributionBaseRules:

    def test_floor_must_be_below_ceiling(self, constants):
        rules = replace(constants.contribution_base, floor_multiple=Decimal("30"))
        result = validate_constants(replace(constants, contribution_base=rules))

        assert any("floor_multiple must be below" in e for e in result.errors)

    def test_exemption_outside_range_is_warning(self, constants):
        rules = replace(constants.contribution_base, parafiscal_exemption_multiple=Decimal("40"))
        result = validate_constants(replace(constants, contribution_base=rules))

        assert result.is_valid
        assert any("parafiscal_exemption_multiple" in w for w in result.warnings)


class TestTables:

    def test_bracket_gap(self, constants):
        brackets = list(constants.withholding_brackets)
        brackets[2] = replace(brackets[2], lower_uvt=Decimal("160"))
        result = validate_constants(replace(constants, withholding_brackets=tuple(brackets)))

        assert any("must start at 150 UVT" in e for e in result.errors)

    def test_last_bracket_open_ended(self, constants):
        brackets = constants.withholding_brackets[:-1] + (
            WithholdingBracket(Decimal("2300"), Decimal("9999"), Decimal("0.39"), Decimal("770")),
        )
        result = validate_constants(replace(constants, withholding_brackets=brackets))

        assert any("must be open-ended" in e for e in result.errors)

    def test_decreasing_solidarity_rate(self, constants):
        tiers = list(constants.solidarity_tiers)
        tiers[2] = SolidarityTier(Decimal("16"), Decimal("17"), Decimal("0.005"))
        result = validate_constants(replace(constants, solidarity_tiers=tuple(tiers)))

        assert "solidarity_tiers[2].rate decreases" in result.errors

    def test_empty_tables(self, constants):
        result = validate_constants(
            replace(constants, withholding_brackets=(), solidarity_tiers=())
        )

        assert "withholding_brackets must not be empty" in result.errors
        assert "solidarity_tiers must not be empty" in result.errors

    def test_missing_risk_tier(self, constants):
        premiums = tuple(p for p in constants.risk_premiums if p[0] is not RiskTier.V)
        result = validate_constants(replace(constants, risk_premiums=premiums))

        assert "risk_premiums is missing tier V" in result.errors
