"""
Tests for the WorkerContract input record and its nested value objects.
"""

from datetime import date
from decimal import Decimal

import pytest

from payroll_kernel.domain import (
    MAX_CUSTOM_DEDUCTIONS,
    ContractType,
    CustomDeduction,
    DeductionParameters,
    EmployerType,
    LiquidationAdvances,
    RiskTier,
    ServiceBonusAdvance,
    ServiceBonusAdvanceMode,
    TerminationReason,
    WorkerContract,
    default_contract,
    to_decimal,
)


class TestAmountCoercion:
    """Numeric fields become Decimal on construction."""

    def test_strings_ints_and_floats_become_decimal(self):
        contract = WorkerContract(
            base_salary="2000000", commissions=150000, day_overtime_hours=2.5
        )

        assert contract.base_salary == Decimal("2000000")
        assert contract.commissions == Decimal("150000")
        assert contract.day_overtime_hours == Decimal("2.5")
        assert isinstance(contract.day_overtime_hours, Decimal)

    def test_none_and_empty_read_as_zero(self):
        contract = WorkerContract(base_salary=None, loans="")

        assert contract.base_salary == Decimal("0")
        assert contract.loans == Decimal("0")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError, match="base_salary cannot be negative"):
            WorkerContract(base_salary="-1")

    def test_negative_hours_rejected(self):
        with pytest.raises(ValueError, match="night_overtime_hours"):
            WorkerContract(night_overtime_hours=-3)

    def test_non_numeric_rejected(self):
        with pytest.raises(ValueError, match="not a valid amount"):
            WorkerContract(commissions="lots")

    def test_bool_is_not_an_amount(self):
        with pytest.raises(ValueError, match="must be numeric"):
            to_decimal(True, field_name="loans")

    def test_contract_is_frozen(self):
        contract = WorkerContract()
        with pytest.raises(AttributeError):
            contract.base_salary = Decimal("1")


class TestEnumCoercion:
    """String enum values from form data are accepted."""

    def test_string_values_coerced(self):
        contract = WorkerContract(
            employer_type="NATURAL",
            contract_type="FIXED_TERM",
            risk_tier="IV",
            termination_reason="RESIGNATION",
        )

        assert contract.employer_type is EmployerType.NATURAL
        assert contract.contract_type is ContractType.FIXED_TERM
        assert contract.risk_tier is RiskTier.IV
        assert contract.termination_reason is TerminationReason.RESIGNATION

    def test_unknown_risk_tier_rejected(self):
        with pytest.raises(ValueError, match="Invalid risk_tier"):
            WorkerContract(risk_tier="VI")

    def test_defaults(self):
        contract = WorkerContract()

        assert contract.employer_type is EmployerType.JURIDICA
        assert contract.contract_type is ContractType.INDEFINITE
        assert contract.risk_tier is RiskTier.I
        assert contract.termination_reason is None
        assert contract.withholding_enabled is False
        assert contract.deductions == DeductionParameters()
        assert contract.advances == LiquidationAdvances()

    def test_none_nested_objects_replaced_by_defaults(self):
        contract = WorkerContract(deductions=None, advances=None)

        assert contract.deductions == DeductionParameters()
        assert contract.advances.custom_total == Decimal("0")


class TestDeductionParameters:

    def test_voluntary_total(self):
        params = DeductionParameters(
            voluntary_pension_contribution="100000",
            voluntary_pension_exempt="50000",
            afc_contribution="25000",
        )
        assert params.voluntary_total == Decimal("175000")

    def test_negative_rejected(self):
        with pytest.raises(ValueError, match="prepaid_medicine"):
            DeductionParameters(prepaid_medicine="-10")


class TestLiquidationAdvances:
    """Advances and custom liquidation deductions."""

    def test_custom_total(self):
        advances = LiquidationAdvances(
            custom_deductions=[
                CustomDeduction("Uniform", "50000"),
                CustomDeduction("Cafeteria", "20000"),
            ]
        )

        assert isinstance(advances.custom_deductions, tuple)
        assert advances.custom_total == Decimal("70000")

    def test_limit_is_enforced(self, captured_logs):
        too_many = [
            CustomDeduction(f"Item {i}", "1000") for i in range(MAX_CUSTOM_DEDUCTIONS + 1)
        ]

        with pytest.raises(ValueError, match="At most 5 custom deductions"):
            LiquidationAdvances(custom_deductions=too_many)

        warnings = [
            r for r in captured_logs() if r["message"] == "custom_deduction_limit_exceeded"
        ]
        assert warnings[0]["count"] == 6

    def test_limit_is_inclusive(self):
        allowed = [CustomDeduction(f"Item {i}", "1") for i in range(MAX_CUSTOM_DEDUCTIONS)]
        assert len(LiquidationAdvances(custom_deductions=allowed).custom_deductions) == 5

    def test_custom_deduction_name_required(self):
        with pytest.raises(ValueError, match="name is required"):
            CustomDeduction("  ", "1000")

    def test_custom_deduction_name_stripped(self):
        assert CustomDeduction(" Uniform ", 1).name == "Uniform"

    @pytest.mark.parametrize(
        "first,second,expected",
        [(False, False, 0), (True, False, 1), (False, True, 1), (True, True, 2)],
    )
    def test_semesters_paid(self, first, second, expected):
        advance = ServiceBonusAdvance(
            mode="SEMESTER", first_semester_paid=first, second_semester_paid=second
        )
        assert advance.mode is ServiceBonusAdvanceMode.SEMESTER
        assert advance.semesters_paid == expected


class TestFromDict:
    """WorkerContract.from_dict() for YAML/JSON form data."""

    def test_nested_mappings_converted(self):
        contract = WorkerContract.from_dict(
            {
                "name": "Ana",
                "base_salary": "4500000",
                "risk_tier": "II",
                "deductions": {"prepaid_medicine": "300000", "has_dependents": True},
                "advances": {
                    "vacation_paid": "100000",
                    "service_bonus": {"mode": "AMOUNT", "amount_paid": "200000"},
                    "custom_deductions": [{"name": "Laptop", "amount": "80000"}],
                },
            }
        )

        assert contract.risk_tier is RiskTier.II
        assert contract.deductions.has_dependents is True
        assert contract.deductions.prepaid_medicine == Decimal("300000")
        assert contract.advances.vacation_paid == Decimal("100000")
        assert contract.advances.service_bonus.amount_paid == Decimal("200000")
        assert contract.advances.custom_deductions == (
            CustomDeduction("Laptop", Decimal("80000")),
        )

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError, match="Unknown contract fields"):
            WorkerContract.from_dict({"base_salary": "1", "bonus_hours": 3})

    def test_dates_passed_through_unvalidated(self):
        contract = WorkerContract.from_dict({"period_start": "not-a-date"})
        assert contract.period_start == "not-a-date"


class TestContractLogging:

    def test_identity_documents_logged_masked(self, captured_logs):
        WorkerContract(worker_id="w-9", document_number="1020304050", company_nit="900123456")

        (record,) = [r for r in captured_logs() if r["message"] == "worker_contract_created"]
        assert record["worker_id"] == "w-9"
        assert record["document_number"] == "***"
        assert record["company_nit"] == "***"


class TestDefaultContract:
    """The new-employee record."""

    def test_defaults_follow_constants(self, constants):
        contract = default_contract(constants, index=3)

        assert contract.name == "Employee 3"
        assert contract.base_salary == constants.minimum_wage
        assert contract.risk_tier is RiskTier.I
        assert contract.exempt_from_parafiscal is True
        assert contract.include_transport_subsidy is True
        assert contract.withholding_enabled is False
        assert contract.period_start == date(2025, 1, 1)
        assert contract.period_end == date(2025, 1, 30)

    def test_worker_ids_are_unique(self, constants):
        assert default_contract(constants).worker_id != default_contract(constants).worker_id
