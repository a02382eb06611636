"""
Pure domain layer.

Input and output value objects of a payroll calculation, with NO
dependencies on configuration loading, persistence, clock or I/O.

All domain objects are immutable and deterministic.
"""

from payroll_kernel.domain.amounts import ZERO, non_negative, round_to_unit, to_decimal
from payroll_kernel.domain.contract import (
    MAX_CUSTOM_DEDUCTIONS,
    ContractType,
    CustomDeduction,
    DeductionParameters,
    EmployerType,
    LiquidationAdvances,
    RiskTier,
    ServiceBonusAdvance,
    ServiceBonusAdvanceMode,
    TerminationReason,
    WorkerContract,
    default_contract,
)
from payroll_kernel.domain.snapshot import (
    BenefitLine,
    ContributionBase,
    EmployeeDeductions,
    EmployerCosts,
    Earnings,
    LiquidationSettlement,
    PayrollResult,
    PayrollSnapshot,
    SnapshotKind,
    WithholdingBreakdown,
)

__all__ = [
    "ZERO",
    "non_negative",
    "round_to_unit",
    "to_decimal",
    "MAX_CUSTOM_DEDUCTIONS",
    "ContractType",
    "CustomDeduction",
    "DeductionParameters",
    "EmployerType",
    "LiquidationAdvances",
    "RiskTier",
    "ServiceBonusAdvance",
    "ServiceBonusAdvanceMode",
    "TerminationReason",
    "WorkerContract",
    "default_contract",
    "BenefitLine",
    "ContributionBase",
    "EmployeeDeductions",
    "EmployerCosts",
    "Earnings",
    "LiquidationSettlement",
    "PayrollResult",
    "PayrollSnapshot",
    "SnapshotKind",
    "WithholdingBreakdown",
]
