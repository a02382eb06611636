"""
Constants Validator (``payroll_config.validator``).

Responsibility
--------------
Validates a parsed ``StatutoryConstants`` before any engine may use it.
A zero or missing statutory value would silently understate every
worker's and employer's obligations, so every such value is an error.

Architecture position
---------------------
**Config layer** -- build-time validation.  Called by
``payroll_config.loader.load_constants_file``.  No dependency on engines.

Invariants enforced
-------------------
* Headline amounts (minimum wage, transport subsidy, UVT, hourly divisor)
  are strictly positive.
* Every rate is in (0, 1]; every multiplier and cap is positive.
* IBC floor < ceiling; the parafiscal threshold lies between them.
* Withholding brackets start at 0, are contiguous, end open-ended, and
  have non-decreasing rates.
* Solidarity tiers start at 0, are contiguous, end open-ended, and have
  non-decreasing rates.
* Every risk tier I..V has a premium.

Failure modes
-------------
* Validation errors (``ConstantsValidationResult.errors``)  -> constants
  MUST NOT be used.
* Validation warnings  -> usable, but should be reviewed.  A withholding
  bracket whose offset does not continue the previous band's formula is
  a warning, since the published table has such steps.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Iterable

from payroll_config.schema import StatutoryConstants
from payroll_kernel.domain.contract import RiskTier

_ZERO = Decimal("0")
_ONE = Decimal("1")


@dataclass
class ConstantsValidationResult:
    """
    Result of constants validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block loading but should be reviewed.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_constants(constants: StatutoryConstants) -> ConstantsValidationResult:
    """
    Validate a constants set.

    Postconditions:
        - Returns a ``ConstantsValidationResult`` with errors and warnings.
        - Constants with errors MUST NOT reach a calculation engine.
    """
    result = ConstantsValidationResult()

    _validate_headline_amounts(constants, result)
    _validate_rate_groups(constants, result)
    _validate_contribution_base(constants, result)
    _validate_withholding_brackets(constants, result)
    _validate_solidarity_tiers(constants, result)
    _validate_risk_premiums(constants, result)

    return result


def _validate_headline_amounts(
    constants: StatutoryConstants, result: ConstantsValidationResult
) -> None:
    for name in ("minimum_wage", "transport_subsidy", "tax_unit_value", "hourly_divisor"):
        value = getattr(constants, name)
        if value <= _ZERO:
            result.add_error(f"{name} must be > 0, got {value}")
    if not constants.jurisdiction:
        result.add_error("jurisdiction is required")


def _positive_fields(
    group: object, prefix: str, result: ConstantsValidationResult
) -> Iterable[tuple[str, Decimal]]:
    for f in fields(group):  # type: ignore[arg-type]
        value = getattr(group, f.name)
        if not isinstance(value, Decimal):
            continue
        if value <= _ZERO:
            result.add_error(f"{prefix}.{f.name} must be > 0, got {value}")
            continue
        yield f.name, value


def _validate_rate_groups(
    constants: StatutoryConstants, result: ConstantsValidationResult
) -> None:
    list(_positive_fields(constants.overtime_multipliers, "overtime_multipliers", result))

    for name, value in _positive_fields(constants.rates, "rates", result):
        if value > _ONE:
            result.add_error(f"rates.{name} must be a fraction <= 1, got {value}")

    limits = constants.withholding_limits
    for name, value in _positive_fields(limits, "withholding_limits", result):
        if name.endswith("_rate") and value > _ONE:
            result.add_error(f"withholding_limits.{name} must be a fraction <= 1, got {value}")
    if limits.months_per_year <= 0:
        result.add_error("withholding_limits.months_per_year must be > 0")


def _validate_contribution_base(
    constants: StatutoryConstants, result: ConstantsValidationResult
) -> None:
    rules = constants.contribution_base
    list(_positive_fields(rules, "contribution_base", result))
    if rules.non_salary_limit > _ONE:
        result.add_error(
            f"contribution_base.non_salary_limit must be <= 1, got {rules.non_salary_limit}"
        )
    if rules.floor_multiple >= rules.ceiling_multiple:
        result.add_error(
            "contribution_base.floor_multiple must be below ceiling_multiple "
            f"({rules.floor_multiple} >= {rules.ceiling_multiple})"
        )
    if not (rules.floor_multiple <= rules.parafiscal_exemption_multiple <= rules.ceiling_multiple):
        result.add_warning(
            "contribution_base.parafiscal_exemption_multiple lies outside the IBC range"
        )


def _validate_withholding_brackets(
    constants: StatutoryConstants, result: ConstantsValidationResult
) -> None:
    brackets = constants.withholding_brackets
    if not brackets:
        result.add_error("withholding_brackets must not be empty")
        return

    if brackets[0].lower_uvt != _ZERO:
        result.add_error(
            f"withholding_brackets must start at 0 UVT, got {brackets[0].lower_uvt}"
        )
    if brackets[-1].upper_uvt is not None:
        result.add_error("last withholding bracket must be open-ended (upper_uvt: null)")

    for i, bracket in enumerate(brackets):
        if bracket.rate < _ZERO or bracket.rate > _ONE:
            result.add_error(f"withholding_brackets[{i}].rate must be in [0, 1]")
        if bracket.offset_uvt < _ZERO:
            result.add_error(f"withholding_brackets[{i}].offset_uvt must be >= 0")
        if i == len(brackets) - 1:
            continue
        if bracket.upper_uvt is None:
            result.add_error(f"withholding_brackets[{i}] is open-ended but not last")
            continue
        if bracket.upper_uvt <= bracket.lower_uvt:
            result.add_error(f"withholding_brackets[{i}] upper_uvt must exceed lower_uvt")

        following = brackets[i + 1]
        if following.lower_uvt != bracket.upper_uvt:
            result.add_error(
                f"withholding_brackets[{i + 1}] must start at {bracket.upper_uvt} UVT, "
                f"got {following.lower_uvt}"
            )
        if following.rate < bracket.rate:
            result.add_error(f"withholding_brackets[{i + 1}].rate decreases")

        at_edge = bracket.retention_uvt(bracket.upper_uvt)
        if following.offset_uvt != at_edge:
            result.add_warning(
                f"withholding bracket step at {bracket.upper_uvt} UVT: "
                f"band ends at {at_edge} UVT, next band starts at {following.offset_uvt} UVT"
            )


def _validate_solidarity_tiers(
    constants: StatutoryConstants, result: ConstantsValidationResult
) -> None:
    tiers = constants.solidarity_tiers
    if not tiers:
        result.add_error("solidarity_tiers must not be empty")
        return

    if tiers[0].lower_multiple != _ZERO:
        result.add_error(
            f"solidarity_tiers must start at 0, got {tiers[0].lower_multiple}"
        )
    if tiers[-1].upper_multiple is not None:
        result.add_error("last solidarity tier must be open-ended (upper_multiple: null)")

    for i, tier in enumerate(tiers):
        if tier.rate < _ZERO or tier.rate > _ONE:
            result.add_error(f"solidarity_tiers[{i}].rate must be in [0, 1]")
        if i == len(tiers) - 1:
            continue
        if tier.upper_multiple is None:
            result.add_error(f"solidarity_tiers[{i}] is open-ended but not last")
            continue
        following = tiers[i + 1]
        if following.lower_multiple != tier.upper_multiple:
            result.add_error(
                f"solidarity_tiers[{i + 1}] must start at {tier.upper_multiple}, "
                f"got {following.lower_multiple}"
            )
        if following.rate < tier.rate:
            result.add_error(f"solidarity_tiers[{i + 1}].rate decreases")


def _validate_risk_premiums(
    constants: StatutoryConstants, result: ConstantsValidationResult
) -> None:
    configured = dict(constants.risk_premiums)
    for tier in RiskTier:
        rate = configured.get(tier)
        if rate is None:
            result.add_error(f"risk_premiums is missing tier {tier.value}")
        elif rate <= _ZERO or rate > _ONE:
            result.add_error(f"risk_premiums.{tier.value} must be in (0, 1], got {rate}")
