"""
PayrollSnapshot -- immutable output of a payroll calculation.

Two snapshots are produced per call: the MONTHLY view (fixed 30-day
provisions) and the LIQUIDATION view (provisions over actual days worked,
with advances and period-end deductions netted out).  Both share the same
earnings, contribution base and employee deductions.

Snapshots are read-only results for report, PDF and persistence layers.
``to_dict()`` gives a JSON-ready form with every Decimal as a string so
no precision is lost on the way out.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from payroll_kernel.domain.amounts import ZERO
from payroll_kernel.domain.contract import CustomDeduction, TerminationReason


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        out = {f.name: _jsonable(getattr(value, f.name)) for f in fields(value)}
        for prop in getattr(value, "_serialized_properties", ()):
            out[prop] = _jsonable(getattr(value, prop))
        return out
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


class SnapshotKind(str, Enum):
    MONTHLY = "monthly"
    LIQUIDATION = "liquidation"


@dataclass(frozen=True)
class Earnings:
    """Gross pay for the period, split by contribution treatment."""

    base_salary: Decimal
    hourly_rate: Decimal
    overtime_total: Decimal
    variables_total: Decimal  # Commissions + salary bonuses
    non_salary_total: Decimal
    transport_subsidy: Decimal
    subtotal_salary: Decimal  # Base + overtime + variables
    total_accrued: Decimal  # Subtotal + transport + non-salary

    _serialized_properties = ("benefit_base",)

    @property
    def benefit_base(self) -> Decimal:
        """Base for severance and service bonus: salary subtotal + transport."""
        return self.subtotal_salary + self.transport_subsidy


@dataclass(frozen=True)
class ContributionBase:
    """The IBC and the 40% non-salary test that produced it."""

    total_remuneration: Decimal
    non_salary_limit: Decimal
    excess_non_salary: Decimal
    raw_amount: Decimal
    ibc: Decimal
    floor: Decimal
    ceiling: Decimal

    @property
    def was_clamped(self) -> bool:
        return self.ibc != self.raw_amount


@dataclass(frozen=True)
class WithholdingBreakdown:
    """Every intermediate of the procedure-1 withholding, for audit."""

    mandatory_contributions: Decimal
    net_labor_base: Decimal
    net_income: Decimal
    housing_deduction: Decimal
    medicine_deduction: Decimal
    dependents_deduction: Decimal
    total_deductions: Decimal
    exempt_voluntary: Decimal
    base_25: Decimal
    exempt_25: Decimal
    total_benefits: Decimal
    final_exemptions: Decimal
    taxable_base: Decimal
    taxable_base_uvt: Decimal
    retention_uvt: Decimal
    withholding: Decimal


@dataclass(frozen=True)
class EmployeeDeductions:
    """Amounts taken out of the worker's pay."""

    health: Decimal
    pension: Decimal
    solidarity_rate: Decimal
    solidarity: Decimal
    withholding: Decimal
    voluntary_pension_contribution: Decimal
    voluntary_pension_exempt: Decimal
    afc_contribution: Decimal
    loans: Decimal
    other_deductions: Decimal
    withholding_breakdown: WithholdingBreakdown | None = None

    _serialized_properties = ("mandatory_total", "voluntary_total", "total")

    @property
    def mandatory_total(self) -> Decimal:
        return self.health + self.pension + self.solidarity

    @property
    def voluntary_total(self) -> Decimal:
        return (
            self.voluntary_pension_contribution
            + self.voluntary_pension_exempt
            + self.afc_contribution
        )

    @property
    def total(self) -> Decimal:
        return (
            self.mandatory_total
            + self.withholding
            + self.voluntary_total
            + self.loans
            + self.other_deductions
        )


@dataclass(frozen=True)
class EmployerCosts:
    """Contributions, parafiscal charges and provisions paid by the employer."""

    is_exempt: bool
    health: Decimal
    pension: Decimal
    risk_rate: Decimal
    risk_premium: Decimal
    parafiscal_base: Decimal
    training: Decimal  # SENA
    welfare: Decimal  # ICBF
    compensation_fund: Decimal  # CCF
    severance: Decimal  # Cesantías
    severance_interest: Decimal
    service_bonus: Decimal  # Prima
    vacation: Decimal
    total_accrued: Decimal

    _serialized_properties = ("contributions_total", "provisions_total", "total")

    @property
    def contributions_total(self) -> Decimal:
        return (
            self.health
            + self.pension
            + self.risk_premium
            + self.training
            + self.welfare
            + self.compensation_fund
        )

    @property
    def provisions_total(self) -> Decimal:
        return self.severance + self.severance_interest + self.service_bonus + self.vacation

    @property
    def total(self) -> Decimal:
        """Full cost of the worker: accrued pay plus every employer line."""
        return self.total_accrued + self.contributions_total + self.provisions_total


@dataclass(frozen=True)
class BenefitLine:
    """One liquidated benefit: gross accrual, advance already paid, net."""

    gross: Decimal
    advance: Decimal
    net: Decimal


@dataclass(frozen=True)
class LiquidationSettlement:
    """Benefits owed at termination or cut-off, net of period deductions."""

    days_worked: int
    benefit_base: Decimal
    severance: BenefitLine
    severance_interest: BenefitLine
    service_bonus: BenefitLine
    vacation: BenefitLine
    withholding: Decimal
    voluntary_contributions: Decimal
    loans: Decimal
    other_deductions: Decimal
    custom_deductions: tuple[CustomDeduction, ...] = ()
    termination_reason: TerminationReason | None = None

    _serialized_properties = (
        "gross_provisions",
        "total_advances",
        "net_provisions",
        "period_deductions",
        "net_amount_owed",
    )

    @property
    def _lines(self) -> tuple[BenefitLine, ...]:
        return (self.severance, self.severance_interest, self.service_bonus, self.vacation)

    @property
    def gross_provisions(self) -> Decimal:
        return sum((line.gross for line in self._lines), ZERO)

    @property
    def total_advances(self) -> Decimal:
        return sum((line.advance for line in self._lines), ZERO)

    @property
    def net_provisions(self) -> Decimal:
        return sum((line.net for line in self._lines), ZERO)

    @property
    def period_deductions(self) -> Decimal:
        return (
            self.withholding
            + self.voluntary_contributions
            + self.loans
            + self.other_deductions
            + sum((d.amount for d in self.custom_deductions), ZERO)
        )

    @property
    def net_amount_owed(self) -> Decimal:
        """Net provisions minus period deductions; may be negative."""
        return self.net_provisions - self.period_deductions


@dataclass(frozen=True)
class PayrollSnapshot:
    """One view (monthly or liquidation) of a worker's payroll."""

    kind: SnapshotKind
    earnings: Earnings
    contribution_base: ContributionBase
    employee_deductions: EmployeeDeductions
    employer_costs: EmployerCosts
    net_pay: Decimal
    days_worked: int
    settlement: LiquidationSettlement | None = None

    @property
    def ibc(self) -> Decimal:
        return self.contribution_base.ibc

    @property
    def net_amount_owed(self) -> Decimal | None:
        if self.settlement is None:
            return None
        return self.settlement.net_amount_owed

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation; Decimals become strings."""
        data = _jsonable(self)
        data["net_amount_owed"] = _jsonable(self.net_amount_owed)
        return data


@dataclass(frozen=True)
class PayrollResult:
    """Monthly and liquidation snapshots for one worker."""

    monthly: PayrollSnapshot
    liquidation: PayrollSnapshot

    def to_dict(self) -> dict[str, Any]:
        return {
            "monthly": self.monthly.to_dict(),
            "liquidation": self.liquidation.to_dict(),
        }
