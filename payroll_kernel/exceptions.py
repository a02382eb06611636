"""
Typed Exception Hierarchy for the Payroll Kernel.

===============================================================================
WHERE ERRORS CAN HAPPEN
===============================================================================

The calculation engines never raise on the happy path. Every intermediate
that could go negative is floored at zero, and malformed period dates fall
back to a standard 30-day month. Errors are therefore structural and live
at the boundary where statutory constants are loaded:

  - a constants set is missing, zero, or malformed  -> fail loudly at startup
  - no constants set exists for the requested year  -> fail loudly at startup
  - an approved constants set was edited afterwards -> fail loudly at startup

Silently defaulting a zero rate would understate every employee's and
employer's obligations, so none of these conditions has a fallback.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollKernelError (base)
    |
    +-- ConfigurationError
    |   +-- ConstantsNotFoundError
    |   +-- ConfigIntegrityError   (payroll_config.integrity)

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIGURATION_INVALID       | Constants missing, zero, or malformed
                | CONSTANTS_NOT_FOUND         | No set for jurisdiction / fiscal year
                | CONFIG_INTEGRITY_MISMATCH   | Constants differ from approved pin

Value-object construction problems (negative base salary, too many custom
deductions) raise ``ValueError`` from ``__post_init__`` like any other
malformed dataclass input.
"""

from __future__ import annotations

from pathlib import Path


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


# Configuration exceptions


class ConfigurationError(PayrollKernelError):
    """Statutory constants are missing, zero, or structurally invalid."""

    code: str = "CONFIGURATION_INVALID"

    def __init__(self, errors: list[str], source: str | Path | None = None):
        self.errors = list(errors)
        self.source = str(source) if source is not None else None
        where = f" ({self.source})" if self.source else ""
        super().__init__(
            f"Statutory constants validation failed{where}:\n"
            + "\n".join(f"  - {e}" for e in self.errors)
        )


class ConstantsNotFoundError(ConfigurationError):
    """No constants set matches the requested jurisdiction and fiscal year."""

    code: str = "CONSTANTS_NOT_FOUND"

    def __init__(self, jurisdiction: str, fiscal_year: int, sets_dir: str | Path):
        self.jurisdiction = jurisdiction
        self.fiscal_year = fiscal_year
        self.sets_dir = str(sets_dir)
        super().__init__(
            [
                f"No constants set found for jurisdiction='{jurisdiction}' "
                f"fiscal_year={fiscal_year} in {sets_dir}"
            ],
            source=sets_dir,
        )

