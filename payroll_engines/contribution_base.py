"""
Contribution base (IBC) resolver.

Non-salary pay above 40% of total remuneration is added back into the
base, then the base is clamped to [1, 25] minimum wages.  The clamp is a
hard invariant: contributions are never computed outside that range.
"""

from __future__ import annotations

from payroll_config.schema import StatutoryConstants
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.amounts import non_negative
from payroll_kernel.domain.snapshot import ContributionBase, Earnings
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.contribution_base")


@traced_engine("contribution_base", "1.0", fingerprint_fields=("earnings",))
def resolve_contribution_base(
    earnings: Earnings, constants: StatutoryConstants
) -> ContributionBase:
    """Derive the IBC from period earnings."""
    rules = constants.contribution_base

    total_remuneration = earnings.subtotal_salary + earnings.non_salary_total
    non_salary_limit = total_remuneration * rules.non_salary_limit
    excess_non_salary = non_negative(earnings.non_salary_total - non_salary_limit)
    raw_amount = earnings.subtotal_salary + excess_non_salary

    floor = constants.wages(rules.floor_multiple)
    ceiling = constants.wages(rules.ceiling_multiple)
    ibc = min(max(raw_amount, floor), ceiling)

    if ibc != raw_amount:
        logger.debug("contribution_base_clamped", extra={
            "raw_amount": str(raw_amount),
            "ibc": str(ibc),
            "floor": str(floor),
            "ceiling": str(ceiling),
        })

    return ContributionBase(
        total_remuneration=total_remuneration,
        non_salary_limit=non_salary_limit,
        excess_non_salary=excess_non_salary,
        raw_amount=raw_amount,
        ibc=ibc,
        floor=floor,
        ceiling=ceiling,
    )
