"""Lender and borrower models."""

from dataclasses import dataclass
from datetime import datetime

from loan_ledger.models.enums import KycStatus


@dataclass
class Business:
    """Lender tenant that owns products, customers and loans."""

    business_id: str
    name: str
    business_code: str  # Shared with customers at sign-up
    created_at: datetime | None = None


@dataclass
class Customer:
    """Borrower onboarded by a business."""

    customer_id: str
    business_id: str
    full_name: str
    email: str
    phone: str
    kyc_status: KycStatus = KycStatus.NOT_SUBMITTED
    created_at: datetime | None = None
    kyc_reviewed_by: str | None = None
    kyc_reviewed_at: datetime | None = None
    kyc_rejection_reason: str | None = None
