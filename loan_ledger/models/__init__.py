"""Lending domain models."""

from loan_ledger.models.enums import (
    DurationUnit,
    KycStatus,
    LedgerEntryType,
    LoanStatus,
    PaymentMethod,
    PaymentStatus,
    ReconcileAction,
)
from loan_ledger.models.loan import LedgerEntry, Loan, Payment
from loan_ledger.models.party import Business, Customer
from loan_ledger.models.product import LoanProduct, ProductRate

__all__ = [
    "Business",
    "Customer",
    "DurationUnit",
    "KycStatus",
    "LedgerEntry",
    "LedgerEntryType",
    "Loan",
    "LoanProduct",
    "LoanStatus",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "ProductRate",
    "ReconcileAction",
]
