"""
payroll_engines.earnings -- Gross pay accrual for one period.

Responsibility:
    Turn a contract's base salary, overtime hours and variable pay into
    the earnings split the rest of the payroll depends on: salary-type
    pay (enters the contribution base), non-salary pay (enters only
    through the 40% test), and the transport subsidy (never enters it).

Architecture position:
    Engines -- pure calculation layer, zero I/O.  First step of
    ``PayrollCalculator``; every other engine consumes its ``Earnings``.

Invariants enforced:
    - Hourly rate is ``base_salary / hourly_divisor`` (240), independent of
      the calendar hours in the period.
    - ``subtotal_salary = base + overtime + variables``.
    - ``total_accrued = subtotal_salary + transport_subsidy + non_salary``.
    - A zero base salary is read as one minimum wage (a record saved with
      no salary entered).

Failure modes:
    - None on the happy path; inputs were validated by ``WorkerContract``.
"""

from __future__ import annotations

import time
from decimal import Decimal

from payroll_config.schema import StatutoryConstants
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.amounts import ZERO
from payroll_kernel.domain.contract import WorkerContract
from payroll_kernel.domain.snapshot import Earnings
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.earnings")


class EarningsCalculator:
    """
    Pure calculator for period earnings.

    Contract:
        No I/O, fully deterministic.  Statutory values come only from the
        ``StatutoryConstants`` argument.
    """

    @traced_engine("earnings", "1.0", fingerprint_fields=("contract",))
    def accrue(self, contract: WorkerContract, constants: StatutoryConstants) -> Earnings:
        """
        Accrue gross earnings for the contract's period.

        Returns:
            Earnings with every subtotal the downstream engines use.
        """
        t0 = time.monotonic()
        base_salary = contract.base_salary
        if base_salary == ZERO:
            logger.info("base_salary_defaulted_to_minimum_wage", extra={
                "worker_id": contract.worker_id,
                "minimum_wage": str(constants.minimum_wage),
            })
            base_salary = constants.minimum_wage

        hourly_rate = base_salary / constants.hourly_divisor
        overtime_total = self.overtime_total(contract, hourly_rate, constants)

        variables_total = contract.commissions + contract.salary_bonuses
        non_salary_total = contract.non_salary_bonuses
        transport_subsidy = (
            constants.transport_subsidy if contract.include_transport_subsidy else ZERO
        )

        subtotal_salary = base_salary + overtime_total + variables_total
        total_accrued = subtotal_salary + transport_subsidy + non_salary_total

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("earnings_accrued", extra={
            "base_salary": str(base_salary),
            "overtime_total": str(overtime_total),
            "variables_total": str(variables_total),
            "non_salary_total": str(non_salary_total),
            "transport_subsidy": str(transport_subsidy),
            "total_accrued": str(total_accrued),
            "duration_ms": duration_ms,
        })

        return Earnings(
            base_salary=base_salary,
            hourly_rate=hourly_rate,
            overtime_total=overtime_total,
            variables_total=variables_total,
            non_salary_total=non_salary_total,
            transport_subsidy=transport_subsidy,
            subtotal_salary=subtotal_salary,
            total_accrued=total_accrued,
        )

    @staticmethod
    def overtime_lines(
        contract: WorkerContract,
        hourly_rate: Decimal,
        constants: StatutoryConstants,
    ) -> dict[str, Decimal]:
        """Premium pay per category: hours x hourly rate x multiplier."""
        m = constants.overtime_multipliers
        pairs = (
            ("day_overtime", contract.day_overtime_hours, m.day_overtime),
            ("night_overtime", contract.night_overtime_hours, m.night_overtime),
            ("night_surcharge", contract.night_surcharge_hours, m.night_surcharge),
            ("holiday", contract.holiday_hours, m.holiday),
            ("holiday_day_overtime", contract.holiday_day_overtime_hours, m.holiday_day_overtime),
            (
                "holiday_night_overtime",
                contract.holiday_night_overtime_hours,
                m.holiday_night_overtime,
            ),
        )
        return {name: hourly_rate * multiplier * hours for name, hours, multiplier in pairs}

    def overtime_total(
        self,
        contract: WorkerContract,
        hourly_rate: Decimal,
        constants: StatutoryConstants,
    ) -> Decimal:
        return sum(self.overtime_lines(contract, hourly_rate, constants).values(), ZERO)


def accrue_earnings(contract: WorkerContract, constants: StatutoryConstants) -> Earnings:
    """Convenience wrapper around ``EarningsCalculator().accrue``."""
    return EarningsCalculator().accrue(contract, constants)
