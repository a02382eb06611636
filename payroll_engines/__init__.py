"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    payroll calculation engines.  This is the canonical import surface
    for callers (forms, report generators, scripts).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import payroll_kernel and the payroll_config schema.

Invariants enforced:
    - Purity: engines never read the clock, files or the environment.
      Constants arrive as a ``StatutoryConstants`` argument.
    - Decimal-only arithmetic: floats never enter a calculation.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via the ``@traced_engine`` decorator
    (see ``payroll_engines.tracer``), emitting PAYROLL_ENGINE_TRACE log
    records that include engine name, version, input fingerprint, and
    duration.

Usage:
    from payroll_config import get_active_constants
    from payroll_engines import calculate_payroll, format_currency
    from payroll_kernel.domain import WorkerContract

    constants = get_active_constants("CO", 2025)
    result = calculate_payroll(WorkerContract(base_salary="2500000"), constants)
    print(format_currency(result.monthly.net_pay))
"""

from payroll_engines.calendar import DEFAULT_PERIOD_DAYS, days_between_360
from payroll_engines.contribution_base import resolve_contribution_base
from payroll_engines.earnings import EarningsCalculator, accrue_earnings
from payroll_engines.employee_deductions import (
    EmployeeDeductionCalculator,
    calculate_employee_deductions,
    calculate_withholding,
)
from payroll_engines.employer_costs import (
    EmployerCostCalculator,
    calculate_employer_costs,
    is_parafiscal_exempt,
)
from payroll_engines.formatting import format_currency
from payroll_engines.liquidation import LiquidationAssembler, settle_liquidation
from payroll_engines.payroll import PayrollCalculator, calculate_payroll
from payroll_engines.tables import (
    risk_premium_rate,
    solidarity_rate,
    withholding_retention_uvt,
)
from payroll_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "DEFAULT_PERIOD_DAYS",
    "days_between_360",
    "resolve_contribution_base",
    "EarningsCalculator",
    "accrue_earnings",
    "EmployeeDeductionCalculator",
    "calculate_employee_deductions",
    "calculate_withholding",
    "EmployerCostCalculator",
    "calculate_employer_costs",
    "is_parafiscal_exempt",
    "format_currency",
    "LiquidationAssembler",
    "settle_liquidation",
    "PayrollCalculator",
    "calculate_payroll",
    "risk_premium_rate",
    "solidarity_rate",
    "withholding_retention_uvt",
    "compute_input_fingerprint",
    "traced_engine",
]
