"""Outstanding balance derivation.

``outstanding_balance`` is the single source of truth for what a
borrower currently owes: the loan's snapshot total minus its approved
payments. The ledger is an audit trail; ``reconcile_balances`` compares
the two and reports any drift without choosing a winner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import TYPE_CHECKING, Iterable

from loan_ledger.finance.ledger import parse_entry_type, replay_balance
from loan_ledger.finance.money import ENGINE_CONTEXT, ZERO, to_decimal
from loan_ledger.models.enums import LedgerEntryType, PaymentStatus

if TYPE_CHECKING:
    from loan_ledger.models.loan import LedgerEntry, Loan, Payment

logger = logging.getLogger(__name__)


def payable_base(loan: Loan) -> Decimal:
    """Total payable from the snapshot, or the principal for pre-snapshot loans."""
    if loan.total_payable_amount is not None:
        return to_decimal(loan.total_payable_amount)
    return to_decimal(loan.amount)


def outstanding_balance(loan: Loan, approved_payments: Iterable[Payment]) -> Decimal:
    """Compute what is still owed on a loan.

    ``approved_payments`` must already be filtered to approved payments;
    no filtering happens here. The result is negative on overpayment.
    """
    with localcontext(ENGINE_CONTEXT):
        paid = sum((to_decimal(p.amount) for p in approved_payments), ZERO)
        return payable_base(loan) - paid


def approved_only(payments: Iterable[Payment]) -> list[Payment]:
    """Keep payments in the approved state; pending and rejected never count."""
    return [p for p in payments if p.status == PaymentStatus.APPROVED]


@dataclass(frozen=True)
class BalanceReconciliation:
    """Snapshot-derived outstanding compared with the replayed ledger."""

    loan_id: str
    snapshot_outstanding: Decimal
    ledger_balance: Decimal
    ledger_only_charges: Decimal  # Net fees/penalties/adjustments
    difference: Decimal  # ledger_balance - snapshot_outstanding

    @property
    def is_consistent(self) -> bool:
        return self.difference == ZERO


def reconcile_balances(
    loan: Loan,
    entries: list[LedgerEntry],
    approved_payments: Iterable[Payment],
) -> BalanceReconciliation:
    """Compare the snapshot derivation against the loan's ledger.

    Fees, penalties and adjustments have no term in the snapshot formula,
    so they show up in ``ledger_only_charges`` and in ``difference``.
    Whether the ledger should ever be authoritative for them is an open
    product decision; this function only reports.
    """
    snapshot = outstanding_balance(loan, approved_payments)
    ledger = replay_balance(entries)

    charges = ZERO
    with localcontext(ENGINE_CONTEXT):
        for entry in entries:
            kind = parse_entry_type(entry.entry_type)
            size = to_decimal(entry.amount).copy_abs()
            if kind in (LedgerEntryType.FEE, LedgerEntryType.PENALTY):
                charges += size
            elif kind == LedgerEntryType.ADJUSTMENT:
                charges -= size
        difference = ledger - snapshot

    result = BalanceReconciliation(
        loan_id=loan.loan_id,
        snapshot_outstanding=snapshot,
        ledger_balance=ledger,
        ledger_only_charges=charges,
        difference=difference,
    )

    if not result.is_consistent:
        logger.warning(
            "Loan %s ledger balance %s differs from snapshot outstanding %s by %s",
            loan.loan_id,
            ledger,
            snapshot,
            result.difference,
        )

    return result
