"""Tests for the loan book scenario."""

import json
from datetime import datetime
from pathlib import Path

import pytest

from loan_ledger.config import LedgerConfig, ScenarioConfig
from loan_ledger.finance.ledger import find_chain_breaks
from loan_ledger.models import LoanStatus, PaymentStatus
from loan_ledger.scenarios import LoanBookScenario
from loan_ledger.sinks import JsonFileSink
from loan_ledger.workflows.lending import DISBURSED_STATUSES


@pytest.fixture
def scenario(seed: int) -> LoanBookScenario:
    scenario = LoanBookScenario(num_customers=20, fee_rate=0.3, seed=seed)
    scenario.generate()
    return scenario


class TestLoanBookScenario:
    """Tests for LoanBookScenario."""

    def test_generate_scenario(self, scenario: LoanBookScenario) -> None:
        store = scenario.store

        assert len(store.businesses) == 1
        assert len(store.products) == 3
        assert len(store.customers) == 20
        assert len(store.loans) > 0
        assert len(store.payments) > 0

    def test_loans_leave_review(self, scenario: LoanBookScenario) -> None:
        statuses = {loan.status for loan in scenario.store.loans.values()}

        assert LoanStatus.PENDING_REVIEW not in statuses
        assert statuses <= {
            LoanStatus.ACTIVE,
            LoanStatus.DEFAULTED,
            LoanStatus.PAID,
            LoanStatus.REJECTED,
        }

    def test_no_pending_payments(self, scenario: LoanBookScenario) -> None:
        assert all(p.status != PaymentStatus.PENDING for p in scenario.store.payments.values())

    def test_ledger_chains_unbroken(self, scenario: LoanBookScenario) -> None:
        for loan_id in scenario.store.loans:
            assert find_chain_breaks(scenario.store.get_loan_entries(loan_id)) == []

    def test_ledger_drift_is_only_charges(self, scenario: LoanBookScenario) -> None:
        """Ledger and snapshot disagree exactly by the recorded fees."""
        for loan in scenario.store.loans.values():
            if loan.status not in DISBURSED_STATUSES:
                continue
            result = scenario.workflow.reconcile(loan.loan_id)

            assert result.difference == result.ledger_only_charges

    def test_paid_loans_owe_nothing(self, scenario: LoanBookScenario) -> None:
        for loan in scenario.store.loans.values():
            if loan.status == LoanStatus.PAID:
                assert scenario.workflow.outstanding(loan.loan_id) <= 0

    def test_defaulted_loans_are_overdue(self, scenario: LoanBookScenario) -> None:
        now = datetime.now()
        for loan in scenario.store.loans.values():
            if loan.status == LoanStatus.DEFAULTED:
                assert loan.due_date < now
                assert scenario.workflow.outstanding(loan.loan_id) > 0

    def test_rejected_loans_have_no_ledger(self, scenario: LoanBookScenario) -> None:
        for loan in scenario.store.loans.values():
            if loan.status == LoanStatus.REJECTED:
                assert scenario.store.get_loan_entries(loan.loan_id) == []

    def test_book_summary(self, scenario: LoanBookScenario) -> None:
        summary = scenario.get_book_summary()

        assert summary["total_loans"] == len(scenario.store.loans)
        assert sum(summary["loan_status_distribution"].values()) == summary["total_loans"]
        assert summary["total_principal"] > 0
        assert summary["total_outstanding"] >= 0
        assert summary["loans_with_chain_breaks"] == 0

    def test_empty_summary(self, seed: int) -> None:
        assert LoanBookScenario(num_customers=0, seed=seed).get_book_summary() == {}

    def test_seed_reproducible(self, seed: int) -> None:
        first = LoanBookScenario(num_customers=15, seed=seed)
        first.generate()
        second = LoanBookScenario(num_customers=15, seed=seed)
        second.generate()

        first_summary = first.get_book_summary()
        second_summary = second.get_book_summary()
        assert first_summary["loan_status_distribution"] == second_summary["loan_status_distribution"]
        assert first_summary["total_principal"] == second_summary["total_principal"]

    def test_all_rejected(self, seed: int) -> None:
        scenario = LoanBookScenario(num_customers=10, approval_rate=0.0, seed=seed)
        store = scenario.generate()

        assert all(loan.status == LoanStatus.REJECTED for loan in store.loans.values())
        assert store.summary()["ledger_entries"] == 0

    def test_config_overrides_arguments(self, seed: int) -> None:
        config = ScenarioConfig(name="small", num_customers=5, approval_rate=1.0)
        scenario = LoanBookScenario(num_customers=100, approval_rate=0.0, config=config, seed=seed)

        assert scenario.num_customers == 5
        assert scenario.approval_rate == 1.0

    def test_ledger_config_reaches_workflow(self, seed: int) -> None:
        scenario = LoanBookScenario(
            num_customers=1, seed=seed, ledger_config=LedgerConfig(days_per_month=31)
        )

        assert scenario.workflow.config.days_per_month == 31

    def test_export(self, scenario: LoanBookScenario, tmp_path: Path) -> None:
        sink = JsonFileSink(tmp_path)

        scenario.export([sink])

        for name in ["businesses", "customers", "products", "loans", "payments", "ledger"]:
            assert (tmp_path / f"{name}.json").exists()
        ledger = json.loads((tmp_path / "ledger.json").read_text(encoding="utf-8"))
        assert len(ledger) == scenario.store.summary()["ledger_entries"]
        assert ledger[0]["entry_type"] == "principal_disbursed"
