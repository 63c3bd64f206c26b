"""Tests for the ledger balance engine."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import pytest

from loan_ledger.finance.ledger import (
    CREDIT_TYPES,
    DEBIT_TYPES,
    calculate_new_balance,
    find_chain_breaks,
    replay_balance,
)
from loan_ledger.models import LedgerEntry, LedgerEntryType
from loan_ledger.store.ledger import LedgerStore
from loan_ledger.workflows.lending import LendingWorkflow


class TestCalculateNewBalance:
    """Tests for calculate_new_balance."""

    def test_principal_disbursement_increases_balance(self) -> None:
        assert calculate_new_balance(0, 50000, "principal_disbursed") == Decimal("50000")

    def test_interest_accrual_increases_balance(self) -> None:
        assert calculate_new_balance(50000, 7500, "interest_accrued") == Decimal("57500")

    def test_payment_reduces_balance(self) -> None:
        assert calculate_new_balance(57500, 5000, "payment_received") == Decimal("52500")

    @pytest.mark.parametrize("entry_type", ["fee", "penalty"])
    def test_charges_increase_balance(self, entry_type: str) -> None:
        assert calculate_new_balance(1000, 50, entry_type) == Decimal("1050")

    def test_adjustment_is_a_credit(self) -> None:
        assert calculate_new_balance(1000, 200, "adjustment") == Decimal("800")

    def test_accepts_enum_type(self) -> None:
        result = calculate_new_balance(100, 25, LedgerEntryType.PAYMENT_RECEIVED)
        assert result == Decimal("75")

    def test_sequence(self) -> None:
        balance = calculate_new_balance(0, 10000, "principal_disbursed")
        assert balance == 10000

        balance = calculate_new_balance(balance, 1500, "interest_accrued")
        assert balance == 11500

        balance = calculate_new_balance(balance, 5000, "payment_received")
        assert balance == 6500

        balance = calculate_new_balance(balance, 6500, "payment_received")
        assert balance == 0

    def test_overpayment_goes_negative(self) -> None:
        assert calculate_new_balance(1000, 1500, "payment_received") == Decimal("-500")

    def test_sign_of_amount_is_ignored(self) -> None:
        assert calculate_new_balance(100, -50, "payment_received") == Decimal("50")
        assert calculate_new_balance(100, -50, "principal_disbursed") == Decimal("150")

    def test_long_amounts_are_not_rounded(self) -> None:
        amount = Decimal("1234567890123456789012345678901.23")

        assert calculate_new_balance(0, amount, "fee") == amount

    def test_huge_balances_do_not_overflow(self) -> None:
        huge = Decimal("9e999999")

        balance = calculate_new_balance(huge, huge, "fee")

        assert balance == Decimal("1.8e1000000")
        assert calculate_new_balance(balance, balance, "payment_received") == Decimal("0")

    def test_unrecognised_type_leaves_balance_unchanged(self) -> None:
        assert calculate_new_balance(100, 50, "refund") == Decimal("100")

    def test_payment_then_adjustment_both_reduce(self) -> None:
        """Adjustments credit the borrower, so they do not reverse a payment."""
        balance = calculate_new_balance(1000, 200, "payment_received")
        balance = calculate_new_balance(balance, 200, "adjustment")

        assert balance == Decimal("600")

    def test_adjustment_reverses_a_fee(self) -> None:
        balance = calculate_new_balance(1000, 75, "fee")
        balance = calculate_new_balance(balance, 75, "adjustment")

        assert balance == Decimal("1000")

    def test_direction_table_covers_every_type(self) -> None:
        assert DEBIT_TYPES | CREDIT_TYPES == set(LedgerEntryType)
        assert not DEBIT_TYPES & CREDIT_TYPES


def _entry(
    entry_type: LedgerEntryType, amount: str, before: str, after: str, n: int = 0
) -> LedgerEntry:
    return LedgerEntry(
        entry_id=f"entry-{n}",
        loan_id="loan-001",
        entry_type=entry_type,
        amount=Decimal(amount),
        balance_before=Decimal(before),
        balance_after=Decimal(after),
        created_at=datetime(2024, 1, 1 + n),
    )


@pytest.fixture
def chain() -> list[LedgerEntry]:
    return [
        _entry(LedgerEntryType.PRINCIPAL_DISBURSED, "10000", "0", "10000", 0),
        _entry(LedgerEntryType.INTEREST_ACCRUED, "1500", "10000", "11500", 1),
        _entry(LedgerEntryType.PAYMENT_RECEIVED, "5000", "11500", "6500", 2),
    ]


class TestReplayBalance:
    """Tests for replay_balance."""

    def test_replay_matches_last_entry(self, chain: list[LedgerEntry]) -> None:
        assert replay_balance(chain) == chain[-1].balance_after

    def test_empty_ledger_is_opening_balance(self) -> None:
        assert replay_balance([]) == Decimal("0")
        assert replay_balance([], opening_balance=250) == Decimal("250")


class TestFindChainBreaks:
    """Tests for find_chain_breaks."""

    def test_valid_chain(self, chain: list[LedgerEntry]) -> None:
        assert find_chain_breaks(chain) == []

    def test_gap_between_entries(self, chain: list[LedgerEntry]) -> None:
        chain[2] = replace(chain[2], balance_before=Decimal("11000"), balance_after=Decimal("6000"))

        assert find_chain_breaks(chain) == [2]

    def test_wrong_closing_balance(self, chain: list[LedgerEntry]) -> None:
        chain[1] = replace(chain[1], balance_after=Decimal("11400"))

        # Entry 1 closes wrongly, so entry 2 no longer opens at it either
        assert find_chain_breaks(chain) == [1, 2]

    def test_first_entry_must_open_at_zero(self, chain: list[LedgerEntry]) -> None:
        chain[0] = replace(chain[0], balance_before=Decimal("5"), balance_after=Decimal("10005"))

        assert 0 in find_chain_breaks(chain)


class TestLedgerChain:
    """The running balance kept by LedgerStore."""

    def test_entries_chain_through_store(self, workflow: LendingWorkflow) -> None:
        loan = workflow.submit_application("cust-001", "prod-001", "rate-1m", 10000)
        workflow.approve_loan(loan.loan_id, "admin-1")
        for amount in (5000, 3000, 3500):
            payment = workflow.submit_payment(loan.loan_id, amount)
            workflow.reconcile_payment(payment.payment_id, "approve", "admin-1")

        entries = workflow.store.get_loan_entries(loan.loan_id)

        assert [e.balance_after for e in entries] == [
            Decimal("10000"),
            Decimal("11500.00"),
            Decimal("6500.00"),
            Decimal("3500.00"),
            Decimal("0.00"),
        ]
        for i in range(len(entries) - 1):
            assert entries[i].balance_after == entries[i + 1].balance_before
        assert entries[0].balance_before == 0
        assert find_chain_breaks(entries) == []

    def test_concurrent_appends_do_not_lose_updates(self, workflow: LendingWorkflow) -> None:
        store: LedgerStore = workflow.store
        loan = workflow.submit_application("cust-001", "prod-001", "rate-1m", 10000)
        workflow.approve_loan(loan.loan_id, "admin-1")

        def pay() -> None:
            store.append_entry(loan.loan_id, LedgerEntryType.PAYMENT_RECEIVED, 100)

        with ThreadPoolExecutor(max_workers=8) as pool:
            for _ in range(50):
                pool.submit(pay)

        entries = store.get_loan_entries(loan.loan_id)
        assert len(entries) == 52
        assert store.latest_balance(loan.loan_id) == Decimal("6500.00")
        assert find_chain_breaks(entries) == []
