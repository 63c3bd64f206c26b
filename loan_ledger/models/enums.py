"""Enumeration types for lending domain entities."""

from enum import Enum


class LedgerEntryType(str, Enum):
    PRINCIPAL_DISBURSED = "principal_disbursed"
    INTEREST_ACCRUED = "interest_accrued"
    PAYMENT_RECEIVED = "payment_received"
    FEE = "fee"
    PENALTY = "penalty"
    ADJUSTMENT = "adjustment"


class LoanStatus(str, Enum):
    PENDING_REVIEW = "pending_review"
    ACTIVE = "active"
    REJECTED = "rejected"
    PAID = "paid"
    DEFAULTED = "defaulted"
    CLOSED = "closed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class KycStatus(str, Enum):
    NOT_SUBMITTED = "not_submitted"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class DurationUnit(str, Enum):
    MONTH = "month"
    WEEK = "week"


class PaymentMethod(str, Enum):
    MOBILE_MONEY = "mobile_money"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"


class ReconcileAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
