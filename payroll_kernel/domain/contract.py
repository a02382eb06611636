"""
WorkerContract -- the single input record of a payroll calculation.

Responsibility:
    Immutable description of one worker: identity, contract terms, the
    period being paid or liquidated, variable pay for the period, and the
    voluntary/tax deduction parameters.  Also carries the benefits already
    advanced to the worker, which the liquidation nets out.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.  Built by callers
    (form layer, persistence, ``scripts/calculate_payroll.py``) and consumed
    read-only by ``payroll_engines``.

Invariants enforced:
    - Every money and hour field is ``Decimal`` after construction.
    - ``base_salary`` and every variable-pay/deduction amount is >= 0.
    - At most ``MAX_CUSTOM_DEDUCTIONS`` custom liquidation deductions.
    - ``DeductionParameters`` is always present; missing values are zero.

Failure modes:
    - ValueError on negative amounts, non-numeric amounts, unknown enum
      values, or too many custom deductions.
    - Period dates are NOT validated here; malformed dates fall back to a
      standard 30-day period inside the calendar engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping
from uuid import uuid4

from payroll_kernel.domain.amounts import ZERO, to_decimal
from payroll_kernel.logging_config import get_logger

logger = get_logger("domain.contract")

MAX_CUSTOM_DEDUCTIONS = 5


class EmployerType(str, Enum):
    """Legal form of the employer (informational)."""

    NATURAL = "NATURAL"  # Natural person
    JURIDICA = "JURIDICA"  # Legal entity


class ContractType(str, Enum):
    """Labor contract modality."""

    INDEFINITE = "INDEFINITE"
    FIXED_TERM = "FIXED_TERM"
    WORK_OR_LABOR = "WORK_OR_LABOR"  # Ends when the contracted work ends
    APPRENTICESHIP = "APPRENTICESHIP"


class RiskTier(str, Enum):
    """Occupational-risk (ARL) classification, I lowest to V highest."""

    I = "I"  # noqa: E741
    II = "II"
    III = "III"
    IV = "IV"
    V = "V"


class TerminationReason(str, Enum):
    """Why the contract ended (carried into the liquidation, not used in math)."""

    RESIGNATION = "RESIGNATION"
    DISMISSAL_WITH_CAUSE = "DISMISSAL_WITH_CAUSE"
    DISMISSAL_WITHOUT_CAUSE = "DISMISSAL_WITHOUT_CAUSE"
    MUTUAL_AGREEMENT = "MUTUAL_AGREEMENT"
    FIXED_TERM_END = "FIXED_TERM_END"


class ServiceBonusAdvanceMode(str, Enum):
    """How a service-bonus (prima) advance is expressed."""

    SEMESTER = "SEMESTER"  # Whole semesters already paid
    AMOUNT = "AMOUNT"  # A direct amount already paid


def _coerce_amounts(obj: Any, names: tuple[str, ...]) -> None:
    """Convert the named fields of a frozen dataclass to non-negative Decimals."""
    for name in names:
        value = to_decimal(getattr(obj, name), field_name=name)
        if value < ZERO:
            raise ValueError(f"{name} cannot be negative: {value}")
        object.__setattr__(obj, name, value)


def _coerce_enum(obj: Any, name: str, enum_cls: type[Enum]) -> None:
    value = getattr(obj, name)
    if value is None or isinstance(value, enum_cls):
        return
    try:
        object.__setattr__(obj, name, enum_cls(value))
    except ValueError as e:
        raise ValueError(f"Invalid {name}: {value!r}") from e


@dataclass(frozen=True)
class DeductionParameters:
    """
    Voluntary contributions and itemised deductions for withholding.

    All amounts are monthly.  Zero defaults mean "not claimed".
    """

    housing_interest: Decimal = ZERO
    prepaid_medicine: Decimal = ZERO
    voluntary_pension_contribution: Decimal = ZERO  # Non-constitutive income
    voluntary_pension_exempt: Decimal = ZERO  # Exempt income
    afc_contribution: Decimal = ZERO  # Home-savings account, exempt income
    has_dependents: bool = False

    def __post_init__(self) -> None:
        _coerce_amounts(
            self,
            (
                "housing_interest",
                "prepaid_medicine",
                "voluntary_pension_contribution",
                "voluntary_pension_exempt",
                "afc_contribution",
            ),
        )

    @property
    def voluntary_total(self) -> Decimal:
        """All voluntary amounts taken out of the worker's pay."""
        return (
            self.voluntary_pension_contribution
            + self.voluntary_pension_exempt
            + self.afc_contribution
        )


@dataclass(frozen=True)
class ServiceBonusAdvance:
    """Service bonus already paid before the liquidation."""

    mode: ServiceBonusAdvanceMode = ServiceBonusAdvanceMode.AMOUNT
    first_semester_paid: bool = False  # January-June bonus
    second_semester_paid: bool = False  # July-December bonus
    amount_paid: Decimal = ZERO

    def __post_init__(self) -> None:
        _coerce_enum(self, "mode", ServiceBonusAdvanceMode)
        _coerce_amounts(self, ("amount_paid",))

    @property
    def semesters_paid(self) -> int:
        return int(self.first_semester_paid) + int(self.second_semester_paid)


@dataclass(frozen=True)
class CustomDeduction:
    """A named, free-form deduction applied against the liquidation."""

    name: str
    amount: Decimal

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Custom deduction name is required")
        object.__setattr__(self, "name", self.name.strip())
        _coerce_amounts(self, ("amount",))


@dataclass(frozen=True)
class LiquidationAdvances:
    """Benefits advanced to the worker plus custom liquidation deductions."""

    service_bonus: ServiceBonusAdvance = field(default_factory=ServiceBonusAdvance)
    vacation_paid: Decimal = ZERO
    severance_partial: Decimal = ZERO  # Partial severance withdrawal
    severance_interest_paid: Decimal = ZERO
    custom_deductions: tuple[CustomDeduction, ...] = ()

    def __post_init__(self) -> None:
        _coerce_amounts(
            self, ("vacation_paid", "severance_partial", "severance_interest_paid")
        )
        object.__setattr__(self, "custom_deductions", tuple(self.custom_deductions))
        if len(self.custom_deductions) > MAX_CUSTOM_DEDUCTIONS:
            logger.warning(
                "custom_deduction_limit_exceeded",
                extra={
                    "count": len(self.custom_deductions),
                    "limit": MAX_CUSTOM_DEDUCTIONS,
                },
            )
            raise ValueError(
                f"At most {MAX_CUSTOM_DEDUCTIONS} custom deductions are allowed, "
                f"got {len(self.custom_deductions)}"
            )

    @property
    def custom_total(self) -> Decimal:
        return sum((d.amount for d in self.custom_deductions), ZERO)


_HOUR_FIELDS = (
    "day_overtime_hours",
    "night_overtime_hours",
    "night_surcharge_hours",
    "holiday_hours",
    "holiday_day_overtime_hours",
    "holiday_night_overtime_hours",
)

_AMOUNT_FIELDS = (
    "base_salary",
    "commissions",
    "salary_bonuses",
    "non_salary_bonuses",
    "loans",
    "other_deductions",
) + _HOUR_FIELDS


@dataclass(frozen=True)
class WorkerContract:
    """
    One worker's contract and period data.

    ``period_start`` / ``period_end`` accept ``date`` objects or ISO
    strings and may be ``None``; they are interpreted by
    ``payroll_engines.calendar`` and never validated here.
    """

    name: str = ""
    document_number: str = ""
    job_title: str = ""
    company_name: str = ""
    company_nit: str = ""
    worker_id: str = ""
    employer_type: EmployerType = EmployerType.JURIDICA
    contract_type: ContractType = ContractType.INDEFINITE

    base_salary: Decimal = ZERO
    risk_tier: RiskTier = RiskTier.I
    exempt_from_parafiscal: bool = False
    include_transport_subsidy: bool = False

    period_start: date | str | None = None
    period_end: date | str | None = None

    # Overtime and premium hours for the period
    day_overtime_hours: Decimal = ZERO
    night_overtime_hours: Decimal = ZERO
    night_surcharge_hours: Decimal = ZERO
    holiday_hours: Decimal = ZERO
    holiday_day_overtime_hours: Decimal = ZERO
    holiday_night_overtime_hours: Decimal = ZERO

    # Variable pay
    commissions: Decimal = ZERO
    salary_bonuses: Decimal = ZERO
    non_salary_bonuses: Decimal = ZERO

    # Other deductions from pay
    loans: Decimal = ZERO
    other_deductions: Decimal = ZERO

    withholding_enabled: bool = False
    deductions: DeductionParameters = field(default_factory=DeductionParameters)

    termination_reason: TerminationReason | None = None
    advances: LiquidationAdvances = field(default_factory=LiquidationAdvances)

    def __post_init__(self) -> None:
        _coerce_amounts(self, _AMOUNT_FIELDS)
        _coerce_enum(self, "employer_type", EmployerType)
        _coerce_enum(self, "contract_type", ContractType)
        _coerce_enum(self, "risk_tier", RiskTier)
        _coerce_enum(self, "termination_reason", TerminationReason)
        if self.deductions is None:
            object.__setattr__(self, "deductions", DeductionParameters())
        if self.advances is None:
            object.__setattr__(self, "advances", LiquidationAdvances())
        logger.debug(
            "worker_contract_created",
            extra={
                "worker_id": self.worker_id,
                "document_number": self.document_number,
                "company_nit": self.company_nit,
                "contract_type": self.contract_type.value,
                "base_salary": str(self.base_salary),
                "risk_tier": self.risk_tier.value,
            },
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WorkerContract:
        """
        Build a contract from a plain mapping (YAML/JSON form data).

        Nested ``deductions`` and ``advances`` mappings are converted to
        their value objects.  Unknown keys raise ``ValueError``.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown contract fields: {sorted(unknown)}")

        values = dict(data)
        if isinstance(values.get("deductions"), Mapping):
            values["deductions"] = DeductionParameters(**values["deductions"])
        if isinstance(values.get("advances"), Mapping):
            values["advances"] = _advances_from_dict(values["advances"])
        return cls(**values)


def _advances_from_dict(data: Mapping[str, Any]) -> LiquidationAdvances:
    values = dict(data)
    if isinstance(values.get("service_bonus"), Mapping):
        values["service_bonus"] = ServiceBonusAdvance(**values["service_bonus"])
    values["custom_deductions"] = tuple(
        d if isinstance(d, CustomDeduction) else CustomDeduction(**d)
        for d in values.get("custom_deductions") or ()
    )
    return LiquidationAdvances(**values)


def default_contract(constants: Any, index: int = 1) -> WorkerContract:
    """
    The record a new-employee form starts from.

    ``constants`` is any object exposing ``minimum_wage`` (normally a
    ``StatutoryConstants``).  The worker earns one minimum wage, tier I,
    exempt from parafiscal contributions, with transport subsidy, for
    January 1-30 of the constants' fiscal year (2025 if unknown).
    """
    year = getattr(constants, "fiscal_year", 2025)
    return WorkerContract(
        worker_id=str(uuid4()),
        name=f"Employee {index}",
        employer_type=EmployerType.JURIDICA,
        contract_type=ContractType.INDEFINITE,
        base_salary=constants.minimum_wage,
        risk_tier=RiskTier.I,
        exempt_from_parafiscal=True,
        include_transport_subsidy=True,
        period_start=date(year, 1, 1),
        period_end=date(year, 1, 30),
        withholding_enabled=False,
    )
