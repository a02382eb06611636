"""
payroll_engines.employer_costs -- Employer contributions and monthly provisions.

Responsibility:
    Employer health and pension contributions, the occupational-risk
    premium, the three parafiscal charges, and the monthly provisions for
    severance, severance interest, service bonus and vacation.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Consumes ``Earnings``
    and the resolved IBC.  The liquidation assembler reuses the
    contribution lines and replaces the provisions.

Invariants enforced:
    - Exemption requires the contract flag AND a salary subtotal below
      10 minimum wages; it zeroes employer health, training and welfare
      but never the compensation fund or pension.
    - Parafiscal base is ``subtotal_salary + non_salary``.
    - Severance and service bonus accrue on ``subtotal_salary +
      transport_subsidy``; vacation accrues on ``subtotal_salary`` only.
    - Severance interest is a share of the severance provision.

Failure modes:
    - ``KeyError`` if the constants have no premium for the contract's
      risk tier (prevented by constants validation).
"""

from __future__ import annotations

import time
from decimal import Decimal

from payroll_config.schema import StatutoryConstants
from payroll_engines.tables import risk_premium_rate
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.amounts import ZERO
from payroll_kernel.domain.contract import WorkerContract
from payroll_kernel.domain.snapshot import EmployerCosts, Earnings
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.employer_costs")


def is_parafiscal_exempt(
    contract: WorkerContract, earnings: Earnings, constants: StatutoryConstants
) -> bool:
    """Whether the employer is exempt from health, SENA and ICBF for this worker."""
    threshold = constants.wages(constants.contribution_base.parafiscal_exemption_multiple)
    return contract.exempt_from_parafiscal and earnings.subtotal_salary < threshold


class EmployerCostCalculator:
    """
    Pure calculator for the employer side of the payroll.

    Guarantees:
        - ``total = total_accrued + contributions + provisions``.
    """

    @traced_engine(
        "employer_costs", "1.0", fingerprint_fields=("contract", "earnings", "ibc")
    )
    def calculate(
        self,
        contract: WorkerContract,
        earnings: Earnings,
        ibc: Decimal,
        constants: StatutoryConstants,
    ) -> EmployerCosts:
        """Monthly employer cost with fixed 30-day provisions."""
        t0 = time.monotonic()
        rates = constants.rates
        exempt = is_parafiscal_exempt(contract, earnings, constants)

        health = ZERO if exempt else ibc * rates.employer_health
        pension = ibc * rates.employer_pension
        risk_rate = risk_premium_rate(contract.risk_tier, constants)
        risk_premium = ibc * risk_rate

        parafiscal_base = earnings.subtotal_salary + earnings.non_salary_total
        training = ZERO if exempt else parafiscal_base * rates.training
        welfare = ZERO if exempt else parafiscal_base * rates.welfare
        compensation_fund = parafiscal_base * rates.compensation_fund

        benefit_base = earnings.benefit_base
        severance = benefit_base * rates.severance_accrual
        severance_interest = severance * rates.severance_interest
        service_bonus = benefit_base * rates.service_bonus_accrual
        vacation = earnings.subtotal_salary * rates.vacation_accrual

        costs = EmployerCosts(
            is_exempt=exempt,
            health=health,
            pension=pension,
            risk_rate=risk_rate,
            risk_premium=risk_premium,
            parafiscal_base=parafiscal_base,
            training=training,
            welfare=welfare,
            compensation_fund=compensation_fund,
            severance=severance,
            severance_interest=severance_interest,
            service_bonus=service_bonus,
            vacation=vacation,
            total_accrued=earnings.total_accrued,
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("employer_costs_calculated", extra={
            "is_exempt": exempt,
            "risk_tier": contract.risk_tier.value,
            "contributions_total": str(costs.contributions_total),
            "provisions_total": str(costs.provisions_total),
            "total": str(costs.total),
            "duration_ms": duration_ms,
        })
        return costs


def calculate_employer_costs(
    contract: WorkerContract,
    earnings: Earnings,
    ibc: Decimal,
    constants: StatutoryConstants,
) -> EmployerCosts:
    """Convenience wrapper around ``EmployerCostCalculator().calculate``."""
    return EmployerCostCalculator().calculate(contract, earnings, ibc, constants)
