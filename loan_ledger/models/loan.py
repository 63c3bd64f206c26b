"""Loan, payment and ledger entry models."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from loan_ledger.finance.interest import RepaymentPreview
from loan_ledger.models.enums import (
    LedgerEntryType,
    LoanStatus,
    PaymentMethod,
    PaymentStatus,
)


@dataclass
class Loan:
    """Loan application and contract.

    ``amount``, ``applied_rate``, ``duration_months``, ``interest_amount``
    and ``total_payable_amount`` form the financial snapshot. They are
    written once at submission and never change afterwards, even if the
    product's rates do.
    """

    loan_id: str
    business_id: str
    customer_id: str
    product_id: str | None
    amount: Decimal  # Principal requested/disbursed
    applied_rate: Decimal  # Monthly rate percent
    duration_months: Decimal
    status: LoanStatus
    created_at: datetime
    interest_amount: Decimal | None = None
    total_payable_amount: Decimal | None = None  # None on pre-snapshot loans
    purpose: str = ""
    approved_at: datetime | None = None
    approved_by: str | None = None
    disbursed_at: datetime | None = None
    due_date: datetime | None = None
    rejection_reason: str | None = None

    def snapshot(self) -> RepaymentPreview:
        """Return the stored snapshot as a repayment preview."""
        interest = self.interest_amount if self.interest_amount is not None else Decimal("0")
        total = self.total_payable_amount
        if total is None:
            total = self.amount + interest
        return RepaymentPreview(principal=self.amount, interest=interest, total=total)


@dataclass
class Payment:
    """Repayment submitted by a borrower and reviewed by the lender."""

    payment_id: str
    loan_id: str
    business_id: str
    amount: Decimal
    method: PaymentMethod
    status: PaymentStatus
    created_at: datetime
    provider: str | None = None  # e.g., M-Pesa, bank name
    reference: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None


@dataclass(frozen=True)
class LedgerEntry:
    """Append-only ledger row for a loan.

    ``amount`` is stored as a positive magnitude; ``entry_type`` carries the
    direction.
    """

    entry_id: str
    loan_id: str
    entry_type: LedgerEntryType
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    created_at: datetime
    description: str = ""
    reference_id: str | None = None
