"""
StatutoryConstants schema.

Defines the typed, frozen form of one fiscal year's statutory payroll
constants.  YAML constants sets are parsed into these types by the loader
and checked by the validator before any engine sees them.

Key distinction:
  constants.yaml       = source artifact (human-authored, reviewed, pinned)
  StatutoryConstants   = runtime artifact (validated, frozen, checksummed)

Bracket and tier tables are ordered tuples so the engines never carry a
hard-coded rate.  A new fiscal year is a new constants set, never an
in-place edit.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any

from payroll_kernel.domain.contract import RiskTier

# ---------------------------------------------------------------------------
# Rate groups
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OvertimeMultipliers:
    """Premium multipliers applied to the hourly rate."""

    day_overtime: Decimal  # HED
    night_overtime: Decimal  # HEN
    night_surcharge: Decimal  # RN
    holiday: Decimal  # Sunday/holiday ordinary hours
    holiday_day_overtime: Decimal  # HEDDF
    holiday_night_overtime: Decimal  # HENDF


@dataclass(frozen=True)
class ContributionRates:
    """Fixed percentage rates, expressed as fractions (0.04 = 4%)."""

    employee_health: Decimal
    employee_pension: Decimal
    employer_health: Decimal
    employer_pension: Decimal
    compensation_fund: Decimal  # CCF
    training: Decimal  # SENA
    welfare: Decimal  # ICBF
    vacation_accrual: Decimal
    severance_accrual: Decimal
    severance_interest: Decimal
    service_bonus_accrual: Decimal


@dataclass(frozen=True)
class ContributionBaseRules:
    """IBC rules; multiples are expressed in minimum wages."""

    non_salary_limit: Decimal  # Share of total remuneration
    floor_multiple: Decimal
    ceiling_multiple: Decimal
    parafiscal_exemption_multiple: Decimal


@dataclass(frozen=True)
class WithholdingLimits:
    """Procedure-1 deduction and exemption caps, in tax units (UVT)."""

    housing_interest_uvt: Decimal  # Monthly
    prepaid_medicine_uvt: Decimal  # Monthly
    dependents_uvt: Decimal  # Monthly
    dependents_rate: Decimal
    voluntary_exempt_uvt: Decimal
    exempt_income_rate: Decimal
    exempt_income_annual_uvt: Decimal
    global_ceiling_rate: Decimal
    global_ceiling_annual_uvt: Decimal
    months_per_year: int = 12


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WithholdingBracket:
    """
    One band of the progressive withholding table.

    A taxable base ``x`` in UVT falls in the band when
    ``lower_uvt < x <= upper_uvt``; ``upper_uvt=None`` is open-ended.
    Retention is ``(x - lower_uvt) * rate + offset_uvt``.
    """

    lower_uvt: Decimal
    upper_uvt: Decimal | None
    rate: Decimal
    offset_uvt: Decimal

    def contains(self, base_uvt: Decimal) -> bool:
        if base_uvt <= self.lower_uvt:
            return False
        return self.upper_uvt is None or base_uvt <= self.upper_uvt

    def retention_uvt(self, base_uvt: Decimal) -> Decimal:
        return (base_uvt - self.lower_uvt) * self.rate + self.offset_uvt


@dataclass(frozen=True)
class SolidarityTier:
    """
    One band of the solidarity-surtax table.

    The ratio ``ibc / minimum_wage`` falls in the band when
    ``lower_multiple <= ratio < upper_multiple``; the lower edge is
    inclusive so a boundary value takes the higher band's rate.
    """

    lower_multiple: Decimal
    upper_multiple: Decimal | None
    rate: Decimal

    def contains(self, ratio: Decimal) -> bool:
        if ratio < self.lower_multiple:
            return False
        return self.upper_multiple is None or ratio < self.upper_multiple


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StatutoryConstants:
    """
    Complete statutory constants for one jurisdiction and fiscal year.

    Never mutated.  ``with_overrides`` returns a new instance with its own
    checksum so a what-if calculation can never be mistaken for the
    approved set.
    """

    set_id: str
    jurisdiction: str
    fiscal_year: int
    currency: str
    minimum_wage: Decimal
    transport_subsidy: Decimal
    tax_unit_value: Decimal  # UVT
    hourly_divisor: Decimal
    overtime_multipliers: OvertimeMultipliers
    rates: ContributionRates
    contribution_base: ContributionBaseRules
    withholding_limits: WithholdingLimits
    withholding_brackets: tuple[WithholdingBracket, ...]
    solidarity_tiers: tuple[SolidarityTier, ...]
    risk_premiums: tuple[tuple[RiskTier, Decimal], ...]
    version: int = 1
    checksum: str = ""
    overrides: tuple[tuple[str, str], ...] = field(default=())

    def risk_rate(self, tier: RiskTier) -> Decimal:
        """Occupational-risk premium rate for a tier."""
        for candidate, rate in self.risk_premiums:
            if candidate == tier:
                return rate
        raise KeyError(f"No risk premium configured for tier {tier.value}")

    def uvt(self, units: Decimal | int) -> Decimal:
        """Convert tax units to currency."""
        return Decimal(units) * self.tax_unit_value

    def wages(self, multiple: Decimal | int) -> Decimal:
        """Convert a minimum-wage multiple to currency."""
        return Decimal(multiple) * self.minimum_wage

    def with_overrides(
        self,
        *,
        minimum_wage: Decimal | int | str | None = None,
        transport_subsidy: Decimal | int | str | None = None,
        tax_unit_value: Decimal | int | str | None = None,
    ) -> StatutoryConstants:
        """
        Return a copy with the headline amounts replaced.

        Used for what-if calculations (e.g. a negotiated wage decree that
        is not yet published).  The returned instance records what was
        overridden and carries a checksum derived from the original.
        """
        from payroll_config.loader import compute_checksum

        changes: dict[str, Any] = {}
        for name, value in (
            ("minimum_wage", minimum_wage),
            ("transport_subsidy", transport_subsidy),
            ("tax_unit_value", tax_unit_value),
        ):
            if value is None:
                continue
            amount = Decimal(str(value))
            if amount <= 0:
                raise ValueError(f"{name} override must be positive, got {amount}")
            changes[name] = amount

        if not changes:
            return self

        overrides = dict(self.overrides)
        overrides.update({k: str(v) for k, v in changes.items()})
        checksum = compute_checksum({"base": self.checksum, "overrides": overrides})
        return replace(
            self,
            **changes,
            overrides=tuple(sorted(overrides.items())),
            checksum=checksum,
        )
