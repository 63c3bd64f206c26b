"""Loan product models."""

from dataclasses import dataclass, field
from decimal import Decimal

from loan_ledger.finance.interest import normalize_duration_months
from loan_ledger.models.enums import DurationUnit


@dataclass
class ProductRate:
    """A duration/interest option offered by a product."""

    rate_id: str
    duration_unit: DurationUnit
    duration_value: int
    interest_rate: Decimal  # Percent per month (e.g., 15 for 15%)

    def duration_months(self, weeks_per_month: int = 4) -> Decimal:
        """Duration in months; weekly rates become fractional months."""
        return normalize_duration_months(self.duration_unit, self.duration_value, weeks_per_month)


@dataclass
class LoanProduct:
    """Loan product configured by a business."""

    product_id: str
    business_id: str
    name: str
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    requires_kyc: bool = True
    requires_collateral: bool = False
    is_active: bool = True
    rates: list[ProductRate] = field(default_factory=list)

    def get_rate(self, rate_id: str) -> ProductRate | None:
        """Return the rate with ``rate_id`` if the product offers it."""
        for rate in self.rates:
            if rate.rate_id == rate_id:
                return rate
        return None
