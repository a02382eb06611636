"""
payroll_config -- single public entrypoint for statutory payroll constants.

Responsibility:
    Provides the ONLY way to obtain statutory constants at runtime through
    ``get_active_constants()``.  Engines never read YAML, environment
    variables or module-level constants; they receive a frozen
    ``StatutoryConstants`` from the caller.

Architecture position:
    Configuration -- YAML-driven constants sets, build-time validation.
    Sits above ``payroll_kernel`` and below ``payroll_engines``.  The kernel
    MUST NEVER import from ``payroll_config``.

Invariants enforced:
    - Single entrypoint: all runtime constants flow through
      ``get_active_constants()``.
    - Validation: a set must pass ``validate_constants`` before it is
      returned; zero or missing statutory values fail loudly.
    - Fingerprint pinning: when an APPROVED_FINGERPRINT file exists, the
      set's checksum must match the pinned value.
    - Deterministic: the same YAML always produces the same checksum.

Failure modes:
    - ``ConstantsNotFoundError`` -- no set for the requested jurisdiction
      and fiscal year.
    - ``ConfigurationError`` -- missing keys, malformed values, or
      validation failures.
    - ``ConfigIntegrityError`` -- checksum mismatch against an approved
      pin file.

Audit relevance:
    Every successful ``get_active_constants()`` call emits a
    ``PAYROLL_CONSTANTS_TRACE`` log entry with the set id, version,
    jurisdiction, fiscal year and checksum.  This ties every computed
    snapshot back to the exact constants that produced it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from payroll_config.integrity import ConfigIntegrityError, verify_fingerprint_pin
from payroll_config.loader import compute_checksum, load_constants_file, load_yaml_file
from payroll_config.schema import StatutoryConstants
from payroll_config.validator import ConstantsValidationResult, validate_constants
from payroll_kernel.exceptions import ConstantsNotFoundError

_logger = logging.getLogger("payroll_kernel.config")

# Default constants sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

CONSTANTS_FILE_NAME = "constants.yaml"

__all__ = [
    "ConfigIntegrityError",
    "ConstantsValidationResult",
    "StatutoryConstants",
    "compute_checksum",
    "get_active_constants",
    "load_constants_file",
    "validate_constants",
]


def get_active_constants(
    jurisdiction: str = "CO",
    fiscal_year: int = 2025,
    config_dir: Path | str | None = None,
) -> StatutoryConstants:
    """The ONLY public constants entrypoint.

    Guarantees:
        - The returned ``StatutoryConstants`` has passed validation and
          (when applicable) fingerprint-pin verification.
        - A ``PAYROLL_CONSTANTS_TRACE`` log entry is emitted on every
          successful call.

    Non-goals:
        - This function does NOT cache constants across calls; callers
          load once at startup and hold the returned instance.

    Args:
        jurisdiction: Jurisdiction code, e.g. ``"CO"``.
        fiscal_year: Fiscal year the constants govern.
        config_dir: Override path to the constants sets directory.
            Defaults to payroll_config/sets/.

    Raises:
        ConstantsNotFoundError: If no set matches.
        ConfigurationError: If the matching set is malformed or invalid.
        ConfigIntegrityError: If APPROVED_FINGERPRINT exists and does
            not match the set's checksum.
    """
    sets_dir = Path(config_dir) if config_dir is not None else _DEFAULT_CONFIG_DIR

    set_dir = _find_matching_set(sets_dir, jurisdiction, fiscal_year)
    constants = load_constants_file(set_dir / CONSTANTS_FILE_NAME)

    _logger.info(
        "PAYROLL_CONSTANTS_TRACE",
        extra={
            "trace_type": "PAYROLL_CONSTANTS_TRACE",
            "set_id": constants.set_id,
            "set_version": constants.version,
            "jurisdiction": constants.jurisdiction,
            "fiscal_year": constants.fiscal_year,
            "checksum": constants.checksum,
        },
    )

    # Verify checksum against approved pin (no-op if no pin file)
    verify_fingerprint_pin(
        set_id=constants.set_id,
        checksum=constants.checksum,
        set_dir=set_dir,
    )

    return constants


def _find_matching_set(sets_dir: Path, jurisdiction: str, fiscal_year: int) -> Path:
    """Find the directory of the set matching a jurisdiction and fiscal year.

    Scans every subdirectory of *sets_dir* holding a ``constants.yaml`` and
    reads only its header.  When several sets match, the highest
    ``version`` wins.  There is no fallback to a different year: paying a
    worker under last year's minimum wage is worse than failing.

    Raises:
        ConstantsNotFoundError: If ``sets_dir`` does not exist or no set
            matches.
    """
    candidates: list[tuple[int, Path]] = []

    if sets_dir.is_dir():
        for subdir in sorted(sets_dir.iterdir()):
            source = subdir / CONSTANTS_FILE_NAME
            if not subdir.is_dir() or not source.exists():
                continue
            header = load_yaml_file(source)
            if (
                str(header.get("jurisdiction", "")).upper() == jurisdiction.upper()
                and header.get("fiscal_year") == fiscal_year
            ):
                candidates.append((int(header.get("version", 1)), subdir))

    if not candidates:
        raise ConstantsNotFoundError(jurisdiction, fiscal_year, sets_dir)

    return max(candidates, key=lambda pair: pair[0])[1]
