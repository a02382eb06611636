"""
Tests for statutory constants loading.

Covers:
- The shipped CO-2025 set
- Set discovery by jurisdiction / fiscal year / version
- Missing, zero and malformed values
- Fingerprint pinning
- What-if overrides
"""

from decimal import Decimal
from pathlib import Path

import pytest
import yaml

import payroll_config
from payroll_config import get_active_constants, load_constants_file
from payroll_config.integrity import (
    PINFILE_NAME,
    ConfigIntegrityError,
    read_pinned_fingerprint,
    write_pinned_fingerprint,
)
from payroll_config.loader import compute_checksum, load_yaml_file
from payroll_kernel.domain import RiskTier
from payroll_kernel.exceptions import (
    ConfigurationError,
    ConstantsNotFoundError,
    PayrollKernelError,
)

SHIPPED_SET = Path(payroll_config.__file__).parent / "sets" / "CO-2025"


def _shipped_data() -> dict:
    return load_yaml_file(SHIPPED_SET / "constants.yaml")


def _write_set(sets_dir: Path, name: str, data: dict) -> Path:
    set_dir = sets_dir / name
    set_dir.mkdir(parents=True)
    (set_dir / "constants.yaml").write_text(yaml.safe_dump(data, sort_keys=False))
    return set_dir


class TestShippedConstants:
    """The CO-2025 set that ships with the package."""

    def test_headline_amounts(self, constants):
        assert constants.set_id == "CO-2025"
        assert constants.jurisdiction == "CO"
        assert constants.fiscal_year == 2025
        assert constants.currency == "COP"
        assert constants.minimum_wage == Decimal("1423500")
        assert constants.transport_subsidy == Decimal("200000")
        assert constants.tax_unit_value == Decimal("49799")
        assert constants.hourly_divisor == Decimal("240")

    def test_rates_are_exact_decimals(self, constants):
        assert constants.rates.employer_health == Decimal("0.085")
        assert constants.rates.vacation_accrual == Decimal("0.0417")
        assert constants.rates.severance_accrual == Decimal("0.0833")
        assert constants.rates.severance_interest == Decimal("0.12")

    def test_overtime_multipliers(self, constants):
        m = constants.overtime_multipliers
        assert (
            m.day_overtime,
            m.night_overtime,
            m.night_surcharge,
            m.holiday,
            m.holiday_day_overtime,
            m.holiday_night_overtime,
        ) == (
            Decimal("1.25"),
            Decimal("1.75"),
            Decimal("0.35"),
            Decimal("1.80"),
            Decimal("2.00"),
            Decimal("2.50"),
        )

    def test_tables_are_ordered_and_complete(self, constants):
        assert len(constants.withholding_brackets) == 7
        assert constants.withholding_brackets[-1].upper_uvt is None
        assert len(constants.solidarity_tiers) == 7
        assert [tier for tier, _ in constants.risk_premiums] == list(RiskTier)

    @pytest.mark.parametrize(
        "tier,rate",
        [
            (RiskTier.I, "0.00522"),
            (RiskTier.II, "0.01044"),
            (RiskTier.III, "0.02436"),
            (RiskTier.IV, "0.04350"),
            (RiskTier.V, "0.06960"),
        ],
    )
    def test_risk_premiums(self, constants, tier, rate):
        assert constants.risk_rate(tier) == Decimal(rate)

    def test_checksum_is_sha256_of_source(self, constants):
        assert len(constants.checksum) == 64
        assert constants.checksum == compute_checksum(_shipped_data())

    def test_loading_is_deterministic(self):
        first = load_constants_file(SHIPPED_SET / "constants.yaml")
        second = load_constants_file(SHIPPED_SET / "constants.yaml")
        assert first == second

    def test_constants_are_frozen(self, constants):
        with pytest.raises(AttributeError):
            constants.minimum_wage = Decimal("1")

    def test_trace_emitted(self, captured_logs):
        get_active_constants("CO", 2025)

        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_CONSTANTS_TRACE"]
        assert len(traces) == 1
        assert traces[0]["set_id"] == "CO-2025"
        assert traces[0]["fiscal_year"] == 2025
        assert len(traces[0]["checksum"]) == 64


class TestSetDiscovery:
    """get_active_constants() set selection."""

    def test_unknown_year_raises(self):
        with pytest.raises(ConstantsNotFoundError) as exc_info:
            get_active_constants("CO", 2031)

        assert exc_info.value.code == "CONSTANTS_NOT_FOUND"
        assert exc_info.value.fiscal_year == 2031

    def test_unknown_jurisdiction_raises(self):
        with pytest.raises(ConstantsNotFoundError):
            get_active_constants("PE", 2025)

    def test_jurisdiction_match_is_case_insensitive(self):
        assert get_active_constants("co", 2025).jurisdiction == "CO"

    def test_missing_sets_dir_raises(self, tmp_path):
        with pytest.raises(ConstantsNotFoundError):
            get_active_constants("CO", 2025, config_dir=tmp_path / "nope")

    def test_not_found_is_a_configuration_error(self, tmp_path):
        with pytest.raises(ConfigurationError):
            get_active_constants("CO", 2025, config_dir=tmp_path)

    def test_no_fallback_to_another_year(self, tmp_path):
        """A single available set is NOT used for a different fiscal year."""
        _write_set(tmp_path, "CO-2025", _shipped_data())

        with pytest.raises(ConstantsNotFoundError):
            get_active_constants("CO", 2026, config_dir=tmp_path)

    def test_highest_version_wins(self, tmp_path):
        data = _shipped_data()
        _write_set(tmp_path, "CO-2025-v1", data)
        revised = dict(data, version=2, set_id="CO-2025-v2")
        revised["amounts"] = dict(data["amounts"], transport_subsidy="210000")
        _write_set(tmp_path, "CO-2025-v2", revised)

        constants = get_active_constants("CO", 2025, config_dir=tmp_path)

        assert constants.set_id == "CO-2025-v2"
        assert constants.transport_subsidy == Decimal("210000")

    def test_directories_without_constants_are_ignored(self, tmp_path):
        (tmp_path / "empty").mkdir()
        (tmp_path / "README.txt").write_text("not a set")
        _write_set(tmp_path, "CO-2025", _shipped_data())

        assert get_active_constants("CO", 2025, config_dir=tmp_path).set_id == "CO-2025"


class TestInvalidConstants:
    """Missing or zero statutory values fail loudly."""

    def test_zero_minimum_wage_rejected(self, tmp_path):
        data = _shipped_data()
        data["amounts"]["minimum_wage"] = "0"
        set_dir = _write_set(tmp_path, "bad", data)

        with pytest.raises(ConfigurationError) as exc_info:
            load_constants_file(set_dir / "constants.yaml")

        assert exc_info.value.code == "CONFIGURATION_INVALID"
        assert any("minimum_wage" in e for e in exc_info.value.errors)

    def test_zero_rate_rejected(self, tmp_path):
        data = _shipped_data()
        data["rates"]["employee_health"] = "0"
        set_dir = _write_set(tmp_path, "bad", data)

        with pytest.raises(ConfigurationError, match="rates.employee_health"):
            load_constants_file(set_dir / "constants.yaml")

    def test_missing_section_rejected(self, tmp_path):
        data = _shipped_data()
        del data["withholding_limits"]
        set_dir = _write_set(tmp_path, "bad", data)

        with pytest.raises(ConfigurationError, match="withholding_limits"):
            load_constants_file(set_dir / "constants.yaml")

    def test_missing_field_rejected(self, tmp_path):
        data = _shipped_data()
        del data["rates"]["welfare"]
        set_dir = _write_set(tmp_path, "bad", data)

        with pytest.raises(ConfigurationError, match="welfare"):
            load_constants_file(set_dir / "constants.yaml")

    def test_non_numeric_value_rejected(self, tmp_path):
        data = _shipped_data()
        data["amounts"]["tax_unit_value"] = "forty-nine thousand"
        set_dir = _write_set(tmp_path, "bad", data)

        with pytest.raises(ConfigurationError, match="tax_unit_value"):
            load_constants_file(set_dir / "constants.yaml")

    def test_unknown_risk_tier_rejected(self, tmp_path):
        data = _shipped_data()
        data["risk_premiums"]["VI"] = "0.09"
        set_dir = _write_set(tmp_path, "bad", data)

        with pytest.raises(ConfigurationError, match="VI"):
            load_constants_file(set_dir / "constants.yaml")

    def test_configuration_error_is_kernel_error(self, tmp_path):
        data = _shipped_data()
        data["hourly_divisor"] = "0"
        set_dir = _write_set(tmp_path, "bad", data)

        with pytest.raises(PayrollKernelError):
            load_constants_file(set_dir / "constants.yaml")

    def test_errors_are_collected_not_first_only(self, tmp_path):
        data = _shipped_data()
        data["amounts"]["minimum_wage"] = "0"
        data["amounts"]["transport_subsidy"] = "0"
        set_dir = _write_set(tmp_path, "bad", data)

        with pytest.raises(ConfigurationError) as exc_info:
            load_constants_file(set_dir / "constants.yaml")

        assert len(exc_info.value.errors) >= 2
        assert exc_info.value.source.endswith("constants.yaml")

    def test_missing_file_propagates(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_constants_file(tmp_path / "constants.yaml")


class TestFingerprintPin:
    """APPROVED_FINGERPRINT verification."""

    def test_matching_pin_passes(self, tmp_path):
        set_dir = _write_set(tmp_path, "CO-2025", _shipped_data())
        checksum = load_constants_file(set_dir / "constants.yaml").checksum
        write_pinned_fingerprint(set_dir, checksum)

        constants = get_active_constants("CO", 2025, config_dir=tmp_path)

        assert constants.checksum == read_pinned_fingerprint(set_dir)

    def test_edit_after_approval_raises(self, tmp_path):
        data = _shipped_data()
        set_dir = _write_set(tmp_path, "CO-2025", data)
        write_pinned_fingerprint(
            set_dir, load_constants_file(set_dir / "constants.yaml").checksum
        )

        data["amounts"]["minimum_wage"] = "1500000"
        (set_dir / "constants.yaml").write_text(yaml.safe_dump(data, sort_keys=False))

        with pytest.raises(ConfigIntegrityError) as exc_info:
            get_active_constants("CO", 2025, config_dir=tmp_path)

        assert exc_info.value.code == "CONFIG_INTEGRITY_MISMATCH"
        assert exc_info.value.pin_path == set_dir / PINFILE_NAME

    def test_malformed_pin_rejected(self, tmp_path):
        set_dir = _write_set(tmp_path, "CO-2025", _shipped_data())
        (set_dir / PINFILE_NAME).write_text("approved by payroll team\n")

        with pytest.raises(ConfigurationError, match="Malformed APPROVED_FINGERPRINT"):
            get_active_constants("CO", 2025, config_dir=tmp_path)

    def test_write_rejects_non_digest(self, tmp_path):
        with pytest.raises(ValueError, match="Not a SHA-256"):
            write_pinned_fingerprint(tmp_path, "abc123")

    def test_integrity_error_is_configuration_error(self):
        assert issubclass(ConfigIntegrityError, ConfigurationError)

    def test_no_pin_file_skips_check(self, tmp_path):
        set_dir = _write_set(tmp_path, "CO-2025", _shipped_data())

        assert read_pinned_fingerprint(set_dir) is None
        assert get_active_constants("CO", 2025, config_dir=tmp_path).fiscal_year == 2025


class TestOverrides:
    """StatutoryConstants.with_overrides()."""

    def test_returns_new_instance(self, constants):
        changed = constants.with_overrides(minimum_wage="1500000")

        assert changed is not constants
        assert changed.minimum_wage == Decimal("1500000")
        assert constants.minimum_wage == Decimal("1423500")

    def test_checksum_changes_and_overrides_recorded(self, constants):
        changed = constants.with_overrides(transport_subsidy=Decimal("250000"))

        assert changed.checksum != constants.checksum
        assert dict(changed.overrides) == {"transport_subsidy": "250000"}
        assert changed.transport_subsidy == Decimal("250000")

    def test_no_values_returns_same_instance(self, constants):
        assert constants.with_overrides() is constants

    @pytest.mark.parametrize("value", ["0", "-1"])
    def test_non_positive_override_rejected(self, constants, value):
        with pytest.raises(ValueError, match="must be positive"):
            constants.with_overrides(minimum_wage=value)
