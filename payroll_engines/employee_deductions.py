"""
payroll_engines.employee_deductions -- Amounts withheld from the worker's pay.

Responsibility:
    Mandatory health and pension contributions, the solidarity surtax,
    and (when enabled) monthly income-tax withholding under procedure 1.
    Voluntary contributions, loans and other deductions are passed through
    so the snapshot carries the complete deduction total.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Consumes ``Earnings``
    and the resolved IBC; consumed by ``PayrollCalculator`` and, for the
    period-end deductions, by the liquidation assembler.

Invariants enforced:
    - Health and pension are each ``ibc * 4%``.
    - Solidarity tier boundaries are lower-inclusive.
    - Every intermediate of the withholding is floored at zero through
      ``non_negative``.
    - Exemptions never exceed ``net_income * 40%`` nor the monthly share of
      the annual UVT ceiling; the benefit categories share that one cap.
    - Withholding is rounded half-up to a whole peso; nothing else is
      rounded.
    - The dependents deduction is computed on income net of mandatory
      contributions only (``net_labor_base``), not on ``net_income``.

Failure modes:
    - None on the happy path.  With withholding disabled the breakdown is
      ``None`` and withholding is zero.

Audit relevance:
    ``WithholdingBreakdown`` records each step (deductions, exempt income,
    ceilings, taxable base in UVT, retention in UVT) so a reviewer can
    reproduce the figure against the statutory worksheet.
"""

from __future__ import annotations

import time
from decimal import Decimal

from payroll_config.schema import StatutoryConstants
from payroll_engines.tables import solidarity_rate, withholding_retention_uvt
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.amounts import ZERO, non_negative, round_to_unit
from payroll_kernel.domain.contract import DeductionParameters, WorkerContract
from payroll_kernel.domain.snapshot import (
    EmployeeDeductions,
    Earnings,
    WithholdingBreakdown,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.employee_deductions")


class EmployeeDeductionCalculator:
    """
    Pure calculator for employee-side deductions.

    Contract:
        No I/O, fully deterministic.
    Guarantees:
        - ``total = health + pension + solidarity + withholding
          + voluntary contributions + loans + other deductions``.
    Non-goals:
        - Procedure 2 (fixed-percentage) withholding.
        - Annual reconciliation of withholding.
    """

    @traced_engine(
        "employee_deductions", "1.0", fingerprint_fields=("contract", "earnings", "ibc")
    )
    def calculate(
        self,
        contract: WorkerContract,
        earnings: Earnings,
        ibc: Decimal,
        constants: StatutoryConstants,
    ) -> EmployeeDeductions:
        """
        Calculate every deduction from the worker's pay for the period.

        Args:
            contract: The worker record (flags and voluntary amounts).
            earnings: Output of the earnings engine.
            ibc: Resolved contribution base.
            constants: Statutory constants.
        """
        t0 = time.monotonic()
        logger.info("employee_deductions_started", extra={
            "ibc": str(ibc),
            "subtotal_salary": str(earnings.subtotal_salary),
            "withholding_enabled": contract.withholding_enabled,
        })

        rates = constants.rates
        health = ibc * rates.employee_health
        pension = ibc * rates.employee_pension
        surtax_rate = solidarity_rate(ibc, constants)
        solidarity = ibc * surtax_rate

        breakdown: WithholdingBreakdown | None = None
        withholding = ZERO
        if contract.withholding_enabled:
            breakdown = self.withholding(
                subtotal_salary=earnings.subtotal_salary,
                mandatory_contributions=health + pension + solidarity,
                parameters=contract.deductions,
                constants=constants,
            )
            withholding = breakdown.withholding

        params = contract.deductions
        result = EmployeeDeductions(
            health=health,
            pension=pension,
            solidarity_rate=surtax_rate,
            solidarity=solidarity,
            withholding=withholding,
            voluntary_pension_contribution=params.voluntary_pension_contribution,
            voluntary_pension_exempt=params.voluntary_pension_exempt,
            afc_contribution=params.afc_contribution,
            loans=contract.loans,
            other_deductions=contract.other_deductions,
            withholding_breakdown=breakdown,
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("employee_deductions_completed", extra={
            "health": str(health),
            "pension": str(pension),
            "solidarity_rate": str(surtax_rate),
            "solidarity": str(solidarity),
            "withholding": str(withholding),
            "total": str(result.total),
            "duration_ms": duration_ms,
        })
        return result

    def withholding(
        self,
        subtotal_salary: Decimal,
        mandatory_contributions: Decimal,
        parameters: DeductionParameters,
        constants: StatutoryConstants,
    ) -> WithholdingBreakdown:
        """
        Procedure-1 monthly withholding on labor income.

        Steps: non-constitutive income, itemised deductions (each capped),
        exempt voluntary contributions, 25% exempt labor income, the shared
        40% / UVT ceiling, then the progressive table in UVT.
        """
        limits = constants.withholding_limits
        months = Decimal(limits.months_per_year)

        net_labor_base = non_negative(subtotal_salary - mandatory_contributions)
        net_income = non_negative(
            subtotal_salary - mandatory_contributions - parameters.voluntary_pension_contribution
        )

        housing = min(parameters.housing_interest, constants.uvt(limits.housing_interest_uvt))
        medicine = min(parameters.prepaid_medicine, constants.uvt(limits.prepaid_medicine_uvt))
        dependents = ZERO
        if parameters.has_dependents:
            dependents = min(
                net_labor_base * limits.dependents_rate,
                constants.uvt(limits.dependents_uvt),
            )
        total_deductions = housing + medicine + dependents

        exempt_voluntary = min(
            parameters.voluntary_pension_exempt + parameters.afc_contribution,
            constants.uvt(limits.voluntary_exempt_uvt),
        )

        base_25 = non_negative(net_income - total_deductions - exempt_voluntary)
        exempt_25 = min(
            base_25 * limits.exempt_income_rate,
            constants.uvt(limits.exempt_income_annual_uvt) / months,
        )

        total_benefits = total_deductions + exempt_voluntary + exempt_25
        final_exemptions = min(
            total_benefits,
            net_income * limits.global_ceiling_rate,
            constants.uvt(limits.global_ceiling_annual_uvt) / months,
        )

        taxable_base = non_negative(net_income - final_exemptions)
        taxable_base_uvt = taxable_base / constants.tax_unit_value
        retention_uvt = withholding_retention_uvt(taxable_base_uvt, constants)
        withholding = round_to_unit(retention_uvt * constants.tax_unit_value)

        logger.debug("withholding_calculated", extra={
            "net_income": str(net_income),
            "final_exemptions": str(final_exemptions),
            "taxable_base_uvt": str(taxable_base_uvt),
            "retention_uvt": str(retention_uvt),
            "withholding": str(withholding),
        })

        return WithholdingBreakdown(
            mandatory_contributions=mandatory_contributions,
            net_labor_base=net_labor_base,
            net_income=net_income,
            housing_deduction=housing,
            medicine_deduction=medicine,
            dependents_deduction=dependents,
            total_deductions=total_deductions,
            exempt_voluntary=exempt_voluntary,
            base_25=base_25,
            exempt_25=exempt_25,
            total_benefits=total_benefits,
            final_exemptions=final_exemptions,
            taxable_base=taxable_base,
            taxable_base_uvt=taxable_base_uvt,
            retention_uvt=retention_uvt,
            withholding=withholding,
        )


def calculate_employee_deductions(
    contract: WorkerContract,
    earnings: Earnings,
    ibc: Decimal,
    constants: StatutoryConstants,
) -> EmployeeDeductions:
    """Convenience wrapper around ``EmployeeDeductionCalculator().calculate``."""
    return EmployeeDeductionCalculator().calculate(contract, earnings, ibc, constants)


def calculate_withholding(
    subtotal_salary: Decimal,
    mandatory_contributions: Decimal,
    parameters: DeductionParameters,
    constants: StatutoryConstants,
) -> WithholdingBreakdown:
    """Convenience wrapper around ``EmployeeDeductionCalculator().withholding``."""
    return EmployeeDeductionCalculator().withholding(
        subtotal_salary, mandatory_contributions, parameters, constants
    )
