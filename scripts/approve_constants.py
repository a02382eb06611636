#!/usr/bin/env python3
"""
Approve a statutory constants set by writing its checksum to
APPROVED_FINGERPRINT.

Usage:
    python scripts/approve_constants.py [set_id_or_directory]

If no argument is given, defaults to payroll_config/sets/CO-2025/.
A bare set id (e.g. ``CO-2025``) is looked up under payroll_config/sets/.

The script:
  1. Loads and parses constants.yaml from the directory
  2. Validates the constants (warnings are printed, errors abort)
  3. Writes the checksum to APPROVED_FINGERPRINT

The APPROVED_FINGERPRINT file is a separate git artifact from the YAML;
changing constants.yaml without re-running approval will cause
get_active_constants() to raise ConfigIntegrityError.
"""

import sys
from pathlib import Path

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from payroll_config import CONSTANTS_FILE_NAME
from payroll_config.integrity import write_pinned_fingerprint
from payroll_config.loader import compute_checksum, load_yaml_file, parse_constants
from payroll_config.validator import validate_constants

SETS_DIR = ROOT / "payroll_config" / "sets"


def resolve_set_dir(argument: str | None) -> Path:
    """Map a CLI argument (set id, directory, or nothing) to a set directory."""
    if not argument:
        return SETS_DIR / "CO-2025"
    candidate = Path(argument)
    if candidate.is_dir():
        return candidate
    return SETS_DIR / argument


def approve(set_dir: Path) -> str:
    """Load, validate, and write the pin file.

    Returns the checksum that was written.
    """
    source = set_dir / CONSTANTS_FILE_NAME
    print(f"Loading constants from: {source}")
    data = load_yaml_file(source)
    checksum = compute_checksum(data)
    try:
        constants = parse_constants(data, checksum=checksum)
    except (KeyError, ValueError) as e:
        print(f"PARSE FAILED: {e}")
        sys.exit(1)

    print(f"  set_id:       {constants.set_id}")
    print(f"  version:      {constants.version}")
    print(f"  jurisdiction: {constants.jurisdiction}")
    print(f"  fiscal_year:  {constants.fiscal_year}")
    print(f"  checksum:     {checksum[:16]}...")

    print("Validating...")
    result = validate_constants(constants)
    if not result.is_valid:
        print("VALIDATION FAILED:")
        for err in result.errors:
            print(f"  ERROR: {err}")
        sys.exit(1)
    for w in result.warnings:
        print(f"  WARNING: {w}")

    pin_path = write_pinned_fingerprint(set_dir, checksum)
    print(f"Wrote {pin_path}")
    return checksum


def main():
    target = resolve_set_dir(sys.argv[1] if len(sys.argv) > 1 else None)

    if not (target / CONSTANTS_FILE_NAME).is_file():
        print(f"Error: no {CONSTANTS_FILE_NAME} in {target}", file=sys.stderr)
        sys.exit(1)

    approve(target)
    print("Done. Constants are now pinned.")


if __name__ == "__main__":
    main()
