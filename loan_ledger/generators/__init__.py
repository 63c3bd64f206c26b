"""Synthetic lending data generators."""

from loan_ledger.generators.lending import (
    BusinessGenerator,
    CustomerGenerator,
    PaymentPlanGenerator,
    ProductGenerator,
)

__all__ = [
    "BusinessGenerator",
    "CustomerGenerator",
    "PaymentPlanGenerator",
    "ProductGenerator",
]
