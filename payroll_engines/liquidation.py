"""
payroll_engines.liquidation -- Settlement of accrued benefits over actual days.

Responsibility:
    Re-run the four provisions over the days actually worked (30/360
    convention) instead of a fixed month, subtract benefits already
    advanced, net out the period-end deductions, and report the amount
    owed at termination or cut-off.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Reuses the monthly
    earnings, contribution base, employee deductions and employer
    contribution lines; only the provision lines change.

Invariants enforced:
    - ``severance = benefit_base * days / 360``.
    - ``severance_interest = severance * days * 12% / 360``.
    - ``service_bonus = benefit_base * days / 360``.
    - ``vacation = subtotal_salary * days / 720``.  Vacation accrues at half
      the rate of the other benefits; the 720 divisor is statutory.
    - Each benefit's net is ``non_negative(gross - advance)``.
    - ``net_amount_owed`` is NOT floored: deductions exceeding the
      benefits are a legitimate, reportable outcome.

Failure modes:
    - None.  Malformed period dates liquidate one standard month.
"""

from __future__ import annotations

import time
from dataclasses import replace
from decimal import Decimal

from payroll_config.schema import StatutoryConstants
from payroll_engines.calendar import days_between_360
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.amounts import non_negative
from payroll_kernel.domain.contract import (
    LiquidationAdvances,
    ServiceBonusAdvanceMode,
    WorkerContract,
)
from payroll_kernel.domain.snapshot import (
    BenefitLine,
    ContributionBase,
    EmployeeDeductions,
    EmployerCosts,
    Earnings,
    LiquidationSettlement,
    PayrollSnapshot,
    SnapshotKind,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.liquidation")

COMMERCIAL_YEAR_DAYS = Decimal("360")
VACATION_DIVISOR = Decimal("720")  # 15 working days of vacation per 360 days


def _line(gross: Decimal, advance: Decimal) -> BenefitLine:
    return BenefitLine(gross=gross, advance=advance, net=non_negative(gross - advance))


def service_bonus_advance_value(advances: LiquidationAdvances, benefit_base: Decimal) -> Decimal:
    """
    Value of the service bonus already paid.

    A paid semester is worth half a month of ``benefit_base``; in AMOUNT
    mode the amount paid is taken as entered.
    """
    advance = advances.service_bonus
    if advance.mode == ServiceBonusAdvanceMode.SEMESTER:
        return benefit_base / 2 * advance.semesters_paid
    return advance.amount_paid


class LiquidationAssembler:
    """
    Builds the liquidation view of a payroll.

    Contract:
        No I/O, fully deterministic.
    Guarantees:
        - With no advances, net provisions equal gross provisions.
        - The liquidation employer-cost total is recomputed from the
          liquidation provision lines.
    """

    @traced_engine(
        "liquidation", "1.0", fingerprint_fields=("contract", "earnings", "deductions")
    )
    def settle(
        self,
        contract: WorkerContract,
        earnings: Earnings,
        deductions: EmployeeDeductions,
        constants: StatutoryConstants,
    ) -> LiquidationSettlement:
        """Liquidate benefits over the contract period and net out deductions."""
        t0 = time.monotonic()
        days_worked = days_between_360(contract.period_start, contract.period_end)
        days = Decimal(days_worked)
        benefit_base = earnings.benefit_base
        advances = contract.advances

        severance = benefit_base * days / COMMERCIAL_YEAR_DAYS
        severance_interest = (
            severance * days * constants.rates.severance_interest / COMMERCIAL_YEAR_DAYS
        )
        service_bonus = benefit_base * days / COMMERCIAL_YEAR_DAYS
        vacation = earnings.subtotal_salary * days / VACATION_DIVISOR

        settlement = LiquidationSettlement(
            days_worked=days_worked,
            benefit_base=benefit_base,
            severance=_line(severance, advances.severance_partial),
            severance_interest=_line(severance_interest, advances.severance_interest_paid),
            service_bonus=_line(
                service_bonus, service_bonus_advance_value(advances, benefit_base)
            ),
            vacation=_line(vacation, advances.vacation_paid),
            withholding=deductions.withholding,
            voluntary_contributions=deductions.voluntary_total,
            loans=deductions.loans,
            other_deductions=deductions.other_deductions,
            custom_deductions=advances.custom_deductions,
            termination_reason=contract.termination_reason,
        )

        if settlement.net_amount_owed < 0:
            logger.warning("liquidation_net_amount_negative", extra={
                "worker_id": contract.worker_id,
                "net_provisions": str(settlement.net_provisions),
                "period_deductions": str(settlement.period_deductions),
                "net_amount_owed": str(settlement.net_amount_owed),
            })

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("liquidation_settled", extra={
            "days_worked": days_worked,
            "gross_provisions": str(settlement.gross_provisions),
            "total_advances": str(settlement.total_advances),
            "period_deductions": str(settlement.period_deductions),
            "net_amount_owed": str(settlement.net_amount_owed),
            "termination_reason": (
                contract.termination_reason.value if contract.termination_reason else None
            ),
            "duration_ms": duration_ms,
        })
        return settlement

    def assemble(
        self,
        contract: WorkerContract,
        earnings: Earnings,
        contribution_base: ContributionBase,
        deductions: EmployeeDeductions,
        monthly_costs: EmployerCosts,
        constants: StatutoryConstants,
    ) -> PayrollSnapshot:
        """Liquidation snapshot sharing the monthly earnings and deductions."""
        settlement = self.settle(contract, earnings, deductions, constants)
        employer_costs = replace(
            monthly_costs,
            severance=settlement.severance.gross,
            severance_interest=settlement.severance_interest.gross,
            service_bonus=settlement.service_bonus.gross,
            vacation=settlement.vacation.gross,
        )
        return PayrollSnapshot(
            kind=SnapshotKind.LIQUIDATION,
            earnings=earnings,
            contribution_base=contribution_base,
            employee_deductions=deductions,
            employer_costs=employer_costs,
            net_pay=earnings.total_accrued - deductions.total,
            days_worked=settlement.days_worked,
            settlement=settlement,
        )


def settle_liquidation(
    contract: WorkerContract,
    earnings: Earnings,
    deductions: EmployeeDeductions,
    constants: StatutoryConstants,
) -> LiquidationSettlement:
    """Convenience wrapper around ``LiquidationAssembler().settle``."""
    return LiquidationAssembler().settle(contract, earnings, deductions, constants)
