"""Ledger balance engine.

Balances are debt-positive: a positive balance is money the borrower
owes, a negative balance is a credit owed back to them. Direction comes
from the entry type alone; amounts are always applied as magnitudes.

The engine is stateless. Keeping a loan's ledger chain gap-free (each
entry opening at the previous entry's closing balance) depends on the
caller serialising appends per loan; see ``LedgerStore.append_entry``.
"""

from __future__ import annotations

import logging
from decimal import Decimal, localcontext
from typing import TYPE_CHECKING, Iterable

from loan_ledger.finance.money import ENGINE_CONTEXT, ZERO, Number, to_decimal
from loan_ledger.models.enums import LedgerEntryType

if TYPE_CHECKING:
    from loan_ledger.models.loan import LedgerEntry

logger = logging.getLogger(__name__)

DEBIT_TYPES = frozenset(
    {
        LedgerEntryType.PRINCIPAL_DISBURSED,
        LedgerEntryType.INTEREST_ACCRUED,
        LedgerEntryType.FEE,
        LedgerEntryType.PENALTY,
    }
)

# Adjustments are credits in the borrower's favour.
CREDIT_TYPES = frozenset(
    {
        LedgerEntryType.PAYMENT_RECEIVED,
        LedgerEntryType.ADJUSTMENT,
    }
)


def parse_entry_type(entry_type: LedgerEntryType | str) -> LedgerEntryType | None:
    """Return the matching ``LedgerEntryType`` or None if unrecognised."""
    if isinstance(entry_type, LedgerEntryType):
        return entry_type
    try:
        return LedgerEntryType(entry_type)
    except ValueError:
        return None


def calculate_new_balance(
    current_balance: Number,
    magnitude: Number,
    entry_type: LedgerEntryType | str,
) -> Decimal:
    """Apply one ledger transaction to a balance.

    Parameters
    ----------
    current_balance : Number
        Balance before the transaction.
    magnitude : Number
        Transaction size. The sign is ignored.
    entry_type : LedgerEntryType | str
        Decides whether the magnitude adds to or reduces the debt.

    Returns
    -------
    Decimal
        New balance. Unrecognised types leave the balance unchanged;
        overpayment goes negative.
    """
    balance = to_decimal(current_balance)
    size = to_decimal(magnitude).copy_abs()
    kind = parse_entry_type(entry_type)

    with localcontext(ENGINE_CONTEXT):
        if kind in DEBIT_TYPES:
            return balance + size
        if kind in CREDIT_TYPES:
            return balance - size

    logger.debug("Ignoring unrecognised ledger entry type %r", entry_type)
    return balance


def replay_balance(entries: Iterable[LedgerEntry], opening_balance: Number = ZERO) -> Decimal:
    """Fold the engine over ordered entries, starting at ``opening_balance``."""
    balance = to_decimal(opening_balance)
    for entry in entries:
        balance = calculate_new_balance(balance, entry.amount, entry.entry_type)
    return balance


def find_chain_breaks(entries: list[LedgerEntry]) -> list[int]:
    """Return indices of entries that break the ledger chain.

    An entry is broken when it does not open at the previous entry's
    closing balance (or at zero for the first entry), or when its closing
    balance is not what the engine computes from its opening balance.
    """
    breaks = []
    expected_before = ZERO
    for i, entry in enumerate(entries):
        expected_after = calculate_new_balance(entry.balance_before, entry.amount, entry.entry_type)
        if entry.balance_before != expected_before or entry.balance_after != expected_after:
            breaks.append(i)
        expected_before = entry.balance_after
    return breaks
