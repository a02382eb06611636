"""
Pytest fixtures for the payroll engine test suite.

Provides:
- The shipped CO-2025 statutory constants
- A ``make_contract`` factory with one-minimum-wage defaults
- Structured log capture
"""

import json
import logging
from io import StringIO

import pytest

from payroll_config import get_active_constants
from payroll_kernel.domain import WorkerContract
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "scenario: end-to-end payroll scenario with hand-checked figures"
    )


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture payroll_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, constants, make_contract):
            calculate_payroll(make_contract(), constants)
            logs = captured_logs()
            assert any(r["message"] == "payroll_calculation_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payroll_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture(scope="session")
def constants():
    """The shipped Colombian 2025 constants set."""
    return get_active_constants("CO", 2025)


@pytest.fixture
def make_contract(constants):
    """
    Factory for ``WorkerContract`` with sensible defaults.

    Defaults: one minimum wage, tier I, no transport subsidy, not exempt,
    January 1-30, withholding disabled.  Any field can be overridden.
    """

    def _make(**overrides) -> WorkerContract:
        values = {
            "worker_id": "worker-test",
            "name": "Test Worker",
            "base_salary": constants.minimum_wage,
            "period_start": "2025-01-01",
            "period_end": "2025-01-30",
        }
        values.update(overrides)
        return WorkerContract(**values)

    return _make
