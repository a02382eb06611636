#!/usr/bin/env python3
"""
Calculate the monthly payroll and liquidation for one worker.

The worker is described by a YAML file whose keys are the
``WorkerContract`` field names (nested ``deductions`` and ``advances``
mappings allowed).  Without a file, the default new-employee record is
used.

Usage:
    python3 scripts/calculate_payroll.py worker.yaml
    python3 scripts/calculate_payroll.py worker.yaml --json
    python3 scripts/calculate_payroll.py --minimum-wage 1500000
    python3 scripts/calculate_payroll.py worker.yaml --verbose   # JSON logs on stderr

Example worker.yaml:
    name: Ana Pérez
    base_salary: "4500000"
    risk_tier: II
    include_transport_subsidy: false
    period_start: 2025-01-01
    period_end: 2025-06-30
    withholding_enabled: true
    deductions:
      prepaid_medicine: "300000"
      has_dependents: true
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from payroll_config import get_active_constants
from payroll_engines import calculate_payroll, format_currency
from payroll_kernel.domain import PayrollSnapshot, WorkerContract, default_contract
from payroll_kernel.exceptions import PayrollKernelError
from payroll_kernel.logging_config import configure_logging


class _ContractLoader(yaml.SafeLoader):
    """SafeLoader that leaves date-looking scalars as strings."""


_ContractLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_contract_file(path: Path) -> dict:
    """
    Read a contract YAML file.

    Period dates are kept as text so an impossible date such as
    2025-02-30 reaches the 30/360 day count, which falls back to a
    standard month, instead of failing in the YAML parser.
    """
    with open(path) as f:
        return yaml.load(f, Loader=_ContractLoader) or {}


def _row(label: str, amount) -> str:
    return f"  {label:<34}{format_currency(amount):>18}"


def render_snapshot(title: str, snapshot: PayrollSnapshot) -> str:
    """Plain-text rendering of one snapshot."""
    e = snapshot.earnings
    d = snapshot.employee_deductions
    c = snapshot.employer_costs
    lines = [
        f"{title} ({snapshot.days_worked} days)",
        "Earnings",
        _row("Base salary", e.base_salary),
        _row("Overtime and surcharges", e.overtime_total),
        _row("Commissions and salary bonuses", e.variables_total),
        _row("Non-salary bonuses", e.non_salary_total),
        _row("Transport subsidy", e.transport_subsidy),
        _row("Total accrued", e.total_accrued),
        _row("Contribution base (IBC)", snapshot.ibc),
        "Employee deductions",
        _row("Health", d.health),
        _row("Pension", d.pension),
        _row(f"Solidarity fund ({d.solidarity_rate * 100:.1f}%)", d.solidarity),
        _row("Withholding tax", d.withholding),
        _row("Voluntary contributions", d.voluntary_total),
        _row("Loans and other", d.loans + d.other_deductions),
        _row("Total deductions", d.total),
        _row("Net pay", snapshot.net_pay),
        "Employer costs" + (" (exempt)" if c.is_exempt else ""),
        _row("Health", c.health),
        _row("Pension", c.pension),
        _row(f"Risk premium ({c.risk_rate * 100:.3f}%)", c.risk_premium),
        _row("SENA", c.training),
        _row("ICBF", c.welfare),
        _row("Compensation fund", c.compensation_fund),
        _row("Severance", c.severance),
        _row("Severance interest", c.severance_interest),
        _row("Service bonus", c.service_bonus),
        _row("Vacation", c.vacation),
        _row("Total employer cost", c.total),
    ]
    s = snapshot.settlement
    if s is not None:
        lines += [
            "Settlement",
            _row("Gross benefits", s.gross_provisions),
            _row("Advances already paid", s.total_advances),
            _row("Net benefits", s.net_provisions),
            _row("Period deductions", s.period_deductions),
            _row("Net amount owed", s.net_amount_owed),
        ]
    return "\n".join(lines)


def main() -> int:
    parser = argparse.ArgumentParser(description="Payroll and liquidation for one worker")
    parser.add_argument("contract", nargs="?", type=Path,
                        help="YAML file with WorkerContract fields")
    parser.add_argument("--jurisdiction", default="CO", help="Constants jurisdiction")
    parser.add_argument("--year", type=int, default=2025, help="Constants fiscal year")
    parser.add_argument("--config-dir", type=Path, default=None,
                        help="Override constants sets directory")
    parser.add_argument("--minimum-wage", default=None,
                        help="What-if override of the minimum wage")
    parser.add_argument("--transport-subsidy", default=None,
                        help="What-if override of the transport subsidy")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("--verbose", action="store_true",
                        help="Emit structured JSON logs on stderr")
    args = parser.parse_args()

    if args.verbose:
        configure_logging(level=logging.INFO, stream=sys.stderr)

    try:
        constants = get_active_constants(args.jurisdiction, args.year, args.config_dir)
        constants = constants.with_overrides(
            minimum_wage=args.minimum_wage,
            transport_subsidy=args.transport_subsidy,
        )
        if args.contract is not None:
            contract = WorkerContract.from_dict(load_contract_file(args.contract))
        else:
            contract = default_contract(constants)
    except (PayrollKernelError, ValueError, FileNotFoundError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = calculate_payroll(contract, constants)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return 0

    header = contract.name or "Worker"
    print(f"{header} -- constants {constants.set_id} ({constants.checksum[:12]})")
    print()
    print(render_snapshot("Monthly payroll", result.monthly))
    print()
    print(render_snapshot("Liquidation", result.liquidation))
    return 0


if __name__ == "__main__":
    sys.exit(main())
