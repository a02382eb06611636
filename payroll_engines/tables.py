"""
Bracket and tier lookups over the tables in ``StatutoryConstants``.

The tables are short ordered tuples, so lookups are linear scans.  The
engines never hard-code a rate; a new fiscal year only needs a new
constants set.
"""

from __future__ import annotations

from decimal import Decimal

from payroll_config.schema import StatutoryConstants
from payroll_kernel.domain.amounts import ZERO
from payroll_kernel.domain.contract import RiskTier


def solidarity_rate(ibc: Decimal, constants: StatutoryConstants) -> Decimal:
    """
    Solidarity-surtax rate for a contribution base.

    The tier is selected by ``ibc / minimum_wage`` with lower-inclusive
    bounds: exactly 4 minimum wages already pays 1%.
    """
    ratio = ibc / constants.minimum_wage
    for tier in constants.solidarity_tiers:
        if tier.contains(ratio):
            return tier.rate
    return ZERO


def withholding_retention_uvt(base_uvt: Decimal, constants: StatutoryConstants) -> Decimal:
    """
    Retention in tax units for a taxable base in tax units.

    Zero up to and including the first band's upper edge (95 UVT).
    """
    if base_uvt <= ZERO:
        return ZERO
    for bracket in constants.withholding_brackets:
        if bracket.contains(base_uvt):
            return bracket.retention_uvt(base_uvt)
    return ZERO


def risk_premium_rate(tier: RiskTier, constants: StatutoryConstants) -> Decimal:
    """Occupational-risk premium rate for a tier."""
    return constants.risk_rate(tier)
