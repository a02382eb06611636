"""
payroll_engines.payroll -- Orchestration of a full payroll calculation.

Responsibility:
    Run the engines in order for one worker and return both views:

        Earnings -> IBC -> {employee deductions, employer costs}
                 -> monthly snapshot (30-day provisions)
                 -> liquidation snapshot (actual-day provisions)

Architecture position:
    Engines -- the public entry point of the calculation layer.  Callers
    (forms, report generators, ``scripts/calculate_payroll.py``) build a
    ``WorkerContract``, obtain constants from
    ``payroll_config.get_active_constants()`` once, and call
    ``calculate_payroll`` as often as they like.

Invariants enforced:
    - Stateless and idempotent: the same contract and constants always
      yield equal ``PayrollResult`` objects.
    - The monthly snapshot always reports 30 days worked.

Audit relevance:
    Each calculation runs inside a ``LogContext`` carrying the worker id,
    a fresh calculation id and the constants set id, so every engine
    trace of one calculation can be grouped.
"""

from __future__ import annotations

import time
from uuid import uuid4

from payroll_config.schema import StatutoryConstants
from payroll_engines.calendar import DEFAULT_PERIOD_DAYS
from payroll_engines.contribution_base import resolve_contribution_base
from payroll_engines.earnings import EarningsCalculator
from payroll_engines.employee_deductions import EmployeeDeductionCalculator
from payroll_engines.employer_costs import EmployerCostCalculator
from payroll_engines.liquidation import LiquidationAssembler
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.contract import WorkerContract
from payroll_kernel.domain.snapshot import PayrollResult, PayrollSnapshot, SnapshotKind
from payroll_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.payroll")


class PayrollCalculator:
    """
    Computes monthly and liquidation snapshots for one worker.

    Contract:
        No I/O, no state between calls.  Safe to share across threads.
    """

    def __init__(self) -> None:
        self._earnings = EarningsCalculator()
        self._employee = EmployeeDeductionCalculator()
        self._employer = EmployerCostCalculator()
        self._liquidation = LiquidationAssembler()

    def calculate(
        self, contract: WorkerContract, constants: StatutoryConstants
    ) -> PayrollResult:
        """
        Calculate the payroll for one worker.

        Returns:
            PayrollResult with the monthly and liquidation snapshots.
        """
        with LogContext.bind(
            worker_id=contract.worker_id or None,
            calculation_id=str(uuid4()),
            constants_set=constants.set_id,
        ):
            return self._run(contract, constants)

    @traced_engine("payroll", "1.0", fingerprint_fields=("contract",))
    def _run(
        self, contract: WorkerContract, constants: StatutoryConstants
    ) -> PayrollResult:
        t0 = time.monotonic()
        logger.info("payroll_calculation_started", extra={
            "contract_type": contract.contract_type.value,
            "base_salary": str(contract.base_salary),
            "withholding_enabled": contract.withholding_enabled,
            "constants_checksum": constants.checksum,
        })

        earnings = self._earnings.accrue(contract, constants)
        contribution_base = resolve_contribution_base(earnings, constants)
        ibc = contribution_base.ibc
        deductions = self._employee.calculate(contract, earnings, ibc, constants)
        monthly_costs = self._employer.calculate(contract, earnings, ibc, constants)

        monthly = PayrollSnapshot(
            kind=SnapshotKind.MONTHLY,
            earnings=earnings,
            contribution_base=contribution_base,
            employee_deductions=deductions,
            employer_costs=monthly_costs,
            net_pay=earnings.total_accrued - deductions.total,
            days_worked=DEFAULT_PERIOD_DAYS,
        )
        liquidation = self._liquidation.assemble(
            contract, earnings, contribution_base, deductions, monthly_costs, constants
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("payroll_calculation_completed", extra={
            "ibc": str(ibc),
            "net_pay": str(monthly.net_pay),
            "employer_total": str(monthly_costs.total),
            "days_worked": liquidation.days_worked,
            "net_amount_owed": str(liquidation.net_amount_owed),
            "duration_ms": duration_ms,
        })
        return PayrollResult(monthly=monthly, liquidation=liquidation)


def calculate_payroll(
    contract: WorkerContract, constants: StatutoryConstants
) -> PayrollResult:
    """Calculate monthly and liquidation snapshots for one worker."""
    return PayrollCalculator().calculate(contract, constants)
