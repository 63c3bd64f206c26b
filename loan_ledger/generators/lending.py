"""Generators for lenders, borrowers, products and repayment plans."""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterator

from loan_ledger.finance.money import money
from loan_ledger.generators.base import BaseGenerator
from loan_ledger.models import (
    Business,
    Customer,
    DurationUnit,
    KycStatus,
    LoanProduct,
    PaymentMethod,
    ProductRate,
)


class BusinessGenerator(BaseGenerator):
    """Generate lender tenants."""

    def generate(self) -> Business:
        """Generate a business with a short sign-up code."""
        return Business(
            business_id=self.fake.uuid4(),
            name=self.fake.company(),
            business_code=self.fake.bothify("??###").upper(),
            created_at=datetime.now() - timedelta(days=random.randint(365, 3 * 365)),
        )


class CustomerGenerator(BaseGenerator):
    """Generate borrowers for a business."""

    KYC_STATUSES = list(KycStatus)
    KYC_WEIGHTS = [0.05, 0.10, 0.80, 0.05]

    def generate(self, business_id: str) -> Customer:
        """Generate a single customer."""
        kyc_status = random.choices(self.KYC_STATUSES, weights=self.KYC_WEIGHTS, k=1)[0]

        return Customer(
            customer_id=self.fake.uuid4(),
            business_id=business_id,
            full_name=self.fake.name(),
            email=self.fake.email(),
            phone=self.fake.phone_number(),
            kyc_status=kyc_status,
            created_at=datetime.now() - timedelta(days=random.randint(60, 365)),
        )

    def generate_batch(self, business_id: str, count: int) -> Iterator[Customer]:
        """Generate multiple customers.

        Yields
        ------
        Customer
            Generated customers.
        """
        for _ in range(count):
            yield self.generate(business_id)


class ProductGenerator(BaseGenerator):
    """Generate loan products with their rate tables."""

    # (name, min, max, [(unit, value, monthly rate %)])
    CATALOGUE = [
        (
            "Salary Advance",
            1000,
            50000,
            [(DurationUnit.WEEK, 2, 10), (DurationUnit.MONTH, 1, 15)],
        ),
        (
            "Business Boost",
            10000,
            500000,
            [(DurationUnit.MONTH, 3, 8), (DurationUnit.MONTH, 6, 7), (DurationUnit.MONTH, 12, 5)],
        ),
        (
            "Emergency Loan",
            500,
            20000,
            [(DurationUnit.WEEK, 1, 12), (DurationUnit.WEEK, 4, 10)],
        ),
    ]

    def generate_catalogue(self, business_id: str) -> list[LoanProduct]:
        """Generate one product per catalogue entry."""
        return [self._build(business_id, *entry) for entry in self.CATALOGUE]

    def _build(
        self,
        business_id: str,
        name: str,
        min_amount: int,
        max_amount: int,
        rates: list[tuple[DurationUnit, int, int]],
    ) -> LoanProduct:
        return LoanProduct(
            product_id=self.fake.uuid4(),
            business_id=business_id,
            name=name,
            min_amount=Decimal(min_amount),
            max_amount=Decimal(max_amount),
            requires_kyc=name != "Emergency Loan",
            rates=[
                ProductRate(
                    rate_id=self.fake.uuid4(),
                    duration_unit=unit,
                    duration_value=value,
                    interest_rate=Decimal(rate),
                )
                for unit, value, rate in rates
            ],
        )

    def pick_amount(self, product: LoanProduct) -> Decimal:
        """Pick a requested amount within the product bounds, rounded to 100."""
        low = int(product.min_amount or 100)
        high = int(product.max_amount or low * 10)
        amount = round(random.uniform(low, high) / 100) * 100
        return Decimal(max(low, min(amount, high)))


class PaymentPlanGenerator(BaseGenerator):
    """Split an amount owed into realistic repayment instalments."""

    METHODS = list(PaymentMethod)
    METHOD_WEIGHTS = [0.70, 0.25, 0.05]
    PROVIDERS = {
        PaymentMethod.MOBILE_MONEY: ["M-Pesa", "Airtel Money", "MTN MoMo"],
        PaymentMethod.BANK_TRANSFER: ["Equity Bank", "KCB", "Stanbic"],
        PaymentMethod.CASH: [None],
    }

    def generate(
        self, total: Decimal, max_parts: int = 4
    ) -> list[tuple[Decimal, PaymentMethod, str | None]]:
        """Return ``(amount, method, provider)`` parts summing to ``total``."""
        parts = random.randint(1, max_parts)
        remaining = total
        plan = []
        for i in range(parts):
            if i == parts - 1:
                amount = remaining
            else:
                amount = money(remaining * Decimal(str(round(random.uniform(0.2, 0.6), 2))))
            if amount <= 0:
                continue
            remaining -= amount
            method = random.choices(self.METHODS, weights=self.METHOD_WEIGHTS, k=1)[0]
            plan.append((amount, method, random.choice(self.PROVIDERS[method])))
        return plan
