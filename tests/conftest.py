"""Pytest configuration and fixtures."""

from datetime import datetime
from decimal import Decimal

import pytest

from loan_ledger.models import (
    Business,
    Customer,
    DurationUnit,
    KycStatus,
    LoanProduct,
    ProductRate,
)
from loan_ledger.store.ledger import LedgerStore
from loan_ledger.workflows.lending import LendingWorkflow


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def sample_business() -> Business:
    """Sample lender."""
    return Business(
        business_id="biz-001",
        name="Acme Lending",
        business_code="ACME1",
        created_at=datetime(2023, 1, 1),
    )


@pytest.fixture
def sample_customer(sample_business: Business) -> Customer:
    """Customer who has passed KYC."""
    return Customer(
        customer_id="cust-001",
        business_id=sample_business.business_id,
        full_name="Jane Wanjiku",
        email="jane@example.com",
        phone="+254700000001",
        kyc_status=KycStatus.APPROVED,
        created_at=datetime(2024, 1, 1),
    )


@pytest.fixture
def sample_product(sample_business: Business) -> LoanProduct:
    """Product with monthly and weekly rates."""
    return LoanProduct(
        product_id="prod-001",
        business_id=sample_business.business_id,
        name="Salary Advance",
        min_amount=Decimal("1000"),
        max_amount=Decimal("100000"),
        requires_kyc=True,
        rates=[
            ProductRate("rate-1m", DurationUnit.MONTH, 1, Decimal("15")),
            ProductRate("rate-2w", DurationUnit.WEEK, 2, Decimal("10")),
            ProductRate("rate-3m", DurationUnit.MONTH, 3, Decimal("5")),
        ],
    )


@pytest.fixture
def store(
    sample_business: Business,
    sample_customer: Customer,
    sample_product: LoanProduct,
) -> LedgerStore:
    """Store seeded with one business, customer and product."""
    store = LedgerStore()
    store.add_business(sample_business)
    store.add_customer(sample_customer)
    store.add_product(sample_product)
    return store


@pytest.fixture
def workflow(store: LedgerStore) -> LendingWorkflow:
    """Lending workflow over the seeded store."""
    return LendingWorkflow(store)
