"""
Constants Loader (``payroll_config.loader``).

Responsibility
--------------
Loads a ``constants.yaml`` file and parses it into a typed
``payroll_config.schema.StatutoryConstants``.  The single public entry
point for runtime constants is ``payroll_config.get_active_constants()``;
``load_constants_file`` exists for build and test tooling.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends on the kernel's
domain enums and exceptions only; never on the engines.

Invariants enforced
-------------------
* Every amount and rate is parsed to ``Decimal`` from its YAML text.
  Quoting numbers in YAML is preferred; unquoted floats are read through
  ``str`` so ``0.085`` stays ``Decimal("0.085")``.
* Missing required keys fail; there are no silent defaults for statutory
  values.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  YAML content for identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing keys / bad values  -> ``ConfigurationError`` from
  ``load_constants_file`` (``KeyError`` / ``ValueError`` from the
  individual ``parse_*`` functions).
* Structurally invalid tables  -> ``ConfigurationError`` carrying every
  validator error.
"""

from __future__ import annotations

import hashlib
import json
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import (
    ContributionBaseRules,
    ContributionRates,
    OvertimeMultipliers,
    SolidarityTier,
    StatutoryConstants,
    WithholdingBracket,
    WithholdingLimits,
)
from payroll_config.validator import validate_constants
from payroll_kernel.domain.contract import RiskTier
from payroll_kernel.exceptions import ConfigurationError

_logger = logging.getLogger("payroll_kernel.config.loader")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, name: str) -> Decimal:
    """Parse a YAML scalar into ``Decimal``; ``None`` and bools are rejected."""
    if value is None or isinstance(value, bool):
        raise ValueError(f"{name}: expected a number, got {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"{name}: not a number: {value!r}") from e


def _optional_decimal(value: Any, name: str) -> Decimal | None:
    if value is None:
        return None
    return parse_decimal(value, name)


def _parse_group(data: dict[str, Any], section: str, names: tuple[str, ...]) -> dict[str, Decimal]:
    group = data[section]
    if not isinstance(group, dict):
        raise ValueError(f"{section}: expected a mapping")
    return {name: parse_decimal(group[name], f"{section}.{name}") for name in names}


def parse_overtime_multipliers(data: dict[str, Any]) -> OvertimeMultipliers:
    """Parse the ``overtime_multipliers`` section."""
    return OvertimeMultipliers(
        **_parse_group(
            data,
            "overtime_multipliers",
            (
                "day_overtime",
                "night_overtime",
                "night_surcharge",
                "holiday",
                "holiday_day_overtime",
                "holiday_night_overtime",
            ),
        )
    )


def parse_rates(data: dict[str, Any]) -> ContributionRates:
    """Parse the ``rates`` section."""
    return ContributionRates(
        **_parse_group(
            data,
            "rates",
            (
                "employee_health",
                "employee_pension",
                "employer_health",
                "employer_pension",
                "compensation_fund",
                "training",
                "welfare",
                "vacation_accrual",
                "severance_accrual",
                "severance_interest",
                "service_bonus_accrual",
            ),
        )
    )


def parse_contribution_base(data: dict[str, Any]) -> ContributionBaseRules:
    """Parse the ``contribution_base`` section."""
    return ContributionBaseRules(
        **_parse_group(
            data,
            "contribution_base",
            (
                "non_salary_limit",
                "floor_multiple",
                "ceiling_multiple",
                "parafiscal_exemption_multiple",
            ),
        )
    )


def parse_withholding_limits(data: dict[str, Any]) -> WithholdingLimits:
    """Parse the ``withholding_limits`` section."""
    values = _parse_group(
        data,
        "withholding_limits",
        (
            "housing_interest_uvt",
            "prepaid_medicine_uvt",
            "dependents_uvt",
            "dependents_rate",
            "voluntary_exempt_uvt",
            "exempt_income_rate",
            "exempt_income_annual_uvt",
            "global_ceiling_rate",
            "global_ceiling_annual_uvt",
        ),
    )
    months = data["withholding_limits"].get("months_per_year", 12)
    return WithholdingLimits(**values, months_per_year=int(months))


def parse_withholding_bracket(data: dict[str, Any]) -> WithholdingBracket:
    """Parse one entry of ``withholding_brackets``."""
    return WithholdingBracket(
        lower_uvt=parse_decimal(data["lower_uvt"], "withholding_brackets.lower_uvt"),
        upper_uvt=_optional_decimal(data.get("upper_uvt"), "withholding_brackets.upper_uvt"),
        rate=parse_decimal(data["rate"], "withholding_brackets.rate"),
        offset_uvt=parse_decimal(data.get("offset_uvt", 0), "withholding_brackets.offset_uvt"),
    )


def parse_solidarity_tier(data: dict[str, Any]) -> SolidarityTier:
    """Parse one entry of ``solidarity_tiers``."""
    return SolidarityTier(
        lower_multiple=parse_decimal(data["lower_multiple"], "solidarity_tiers.lower_multiple"),
        upper_multiple=_optional_decimal(
            data.get("upper_multiple"), "solidarity_tiers.upper_multiple"
        ),
        rate=parse_decimal(data["rate"], "solidarity_tiers.rate"),
    )


def parse_risk_premiums(data: dict[str, Any]) -> tuple[tuple[RiskTier, Decimal], ...]:
    """Parse ``risk_premiums`` (tier name -> rate), ordered I..V."""
    raw = data["risk_premiums"]
    if not isinstance(raw, dict):
        raise ValueError("risk_premiums: expected a mapping of tier -> rate")
    parsed: dict[RiskTier, Decimal] = {}
    for key, value in raw.items():
        try:
            tier = RiskTier(str(key))
        except ValueError as e:
            raise ValueError(f"risk_premiums: unknown tier {key!r}") from e
        parsed[tier] = parse_decimal(value, f"risk_premiums.{key}")
    return tuple((tier, parsed[tier]) for tier in RiskTier if tier in parsed)


def parse_constants(data: dict[str, Any], checksum: str = "") -> StatutoryConstants:
    """
    Build a ``StatutoryConstants`` from a parsed YAML mapping.

    Raises:
        KeyError: a required key is missing.
        ValueError: a value is not a number or a table is malformed.
    """
    amounts = _parse_group(
        data, "amounts", ("minimum_wage", "transport_subsidy", "tax_unit_value")
    )
    return StatutoryConstants(
        set_id=str(data["set_id"]),
        jurisdiction=str(data["jurisdiction"]),
        fiscal_year=int(data["fiscal_year"]),
        currency=str(data.get("currency", "COP")),
        version=int(data.get("version", 1)),
        minimum_wage=amounts["minimum_wage"],
        transport_subsidy=amounts["transport_subsidy"],
        tax_unit_value=amounts["tax_unit_value"],
        hourly_divisor=parse_decimal(data["hourly_divisor"], "hourly_divisor"),
        overtime_multipliers=parse_overtime_multipliers(data),
        rates=parse_rates(data),
        contribution_base=parse_contribution_base(data),
        withholding_limits=parse_withholding_limits(data),
        withholding_brackets=tuple(
            parse_withholding_bracket(b) for b in data["withholding_brackets"]
        ),
        solidarity_tiers=tuple(
            parse_solidarity_tier(t) for t in data["solidarity_tiers"]
        ),
        risk_premiums=parse_risk_premiums(data),
        checksum=checksum,
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def load_constants_file(path: Path | str) -> StatutoryConstants:
    """
    Load, parse and validate one constants file.

    Build/test tooling: no fingerprint-pin check and no
    ``PAYROLL_CONSTANTS_TRACE``; runtime callers use
    ``payroll_config.get_active_constants()``.

    Raises:
        FileNotFoundError: if the file does not exist.
        ConfigurationError: if a key is missing, a value is malformed, or
            validation reports any error.
    """
    path = Path(path)
    data = load_yaml_file(path)
    checksum = compute_checksum(data)

    try:
        constants = parse_constants(data, checksum=checksum)
    except KeyError as e:
        raise ConfigurationError([f"Missing required key: {e.args[0]}"], source=path) from e
    except (ValueError, TypeError) as e:
        raise ConfigurationError([str(e)], source=path) from e

    validation = validate_constants(constants)
    for warning in validation.warnings:
        _logger.warning(
            "constants_validation_warning",
            extra={"set_id": constants.set_id, "warning": warning},
        )
    if not validation.is_valid:
        _logger.error(
            "constants_validation_failed",
            extra={"set_id": constants.set_id, "error_count": len(validation.errors)},
        )
        raise ConfigurationError(validation.errors, source=path)

    return constants
