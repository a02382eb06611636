"""
Approval pins for statutory constants sets.

Once a fiscal year's constants have been reviewed against the published
decrees, ``scripts/approve_constants.py`` writes the set's checksum to an
``APPROVED_FINGERPRINT`` file beside ``constants.yaml``.  From then on
``get_active_constants()`` refuses to load the set if the YAML no longer
hashes to the pinned value, so a mistyped minimum wage cannot slip into a
live payroll run.

Sets without a pin file (drafts for a year not yet decreed) load
unchecked.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from payroll_kernel.exceptions import ConfigurationError

_logger = logging.getLogger("payroll_kernel.config.integrity")

PINFILE_NAME = "APPROVED_FINGERPRINT"
_SHA256_HEX = re.compile(r"[0-9a-f]{64}")


class ConfigIntegrityError(ConfigurationError):
    """
    A pinned constants set no longer matches its approved checksum.

    Attributes:
        set_id: The constants set identifier.
        expected: Checksum recorded at approval.
        actual: Checksum of the YAML as loaded.
        pin_path: Location of the pin file.
    """

    code: str = "CONFIG_INTEGRITY_MISMATCH"

    def __init__(self, set_id: str, expected: str, actual: str, pin_path: Path):
        self.set_id = set_id
        self.expected = expected
        self.actual = actual
        self.pin_path = pin_path
        super().__init__(
            [
                f"Constants set '{set_id}' changed since approval: "
                f"approved {expected[:16]}..., loaded {actual[:16]}... "
                "Re-run scripts/approve_constants.py after review."
            ],
            source=pin_path,
        )


def read_pinned_fingerprint(set_dir: Path) -> str | None:
    """
    The approved checksum for a set directory, or ``None`` when unpinned.

    Raises:
        ConfigurationError: If the pin file exists but does not hold a
            SHA-256 hex digest.
    """
    pin_path = Path(set_dir) / PINFILE_NAME
    if not pin_path.is_file():
        return None
    pinned = pin_path.read_text().strip()
    if not _SHA256_HEX.fullmatch(pinned):
        raise ConfigurationError([f"Malformed {PINFILE_NAME}: {pinned[:20]!r}"], source=pin_path)
    return pinned


def write_pinned_fingerprint(set_dir: Path, checksum: str) -> Path:
    """Record ``checksum`` as the approved fingerprint; returns the pin path."""
    if not _SHA256_HEX.fullmatch(checksum):
        raise ValueError(f"Not a SHA-256 hex digest: {checksum!r}")
    pin_path = Path(set_dir) / PINFILE_NAME
    pin_path.write_text(checksum + "\n")
    return pin_path


def verify_fingerprint_pin(set_id: str, checksum: str, set_dir: Path) -> None:
    """Raise ``ConfigIntegrityError`` if the set is pinned to another checksum."""
    pinned = read_pinned_fingerprint(set_dir)
    if pinned is None:
        _logger.debug("constants_set_unpinned", extra={"set_id": set_id})
        return
    if checksum != pinned:
        _logger.error(
            "constants_integrity_mismatch",
            extra={"set_id": set_id, "expected": pinned, "actual": checksum},
        )
        raise ConfigIntegrityError(
            set_id=set_id,
            expected=pinned,
            actual=checksum,
            pin_path=Path(set_dir) / PINFILE_NAME,
        )
