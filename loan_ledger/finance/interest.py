"""Flat simple-interest calculator.

Interest is ``principal * (monthly_rate_pct / 100) * duration_months``
with no compounding. The result is computed once when a loan is
submitted and stored on the loan as its financial snapshot.
"""

from dataclasses import dataclass
from decimal import Decimal, localcontext

from loan_ledger.finance.money import (
    ENGINE_CONTEXT,
    ZERO,
    Number,
    money,
    non_negative,
    to_decimal,
)

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class RepaymentPreview:
    """Principal, interest and total payable for a loan."""

    principal: Decimal
    interest: Decimal
    total: Decimal


def calculate_simple_interest(
    principal: Number,
    monthly_rate_pct: Number,
    duration_months: Number,
) -> RepaymentPreview:
    """Calculate flat simple interest and total payable.

    Negative (or unparseable) inputs count as zero; this function never
    raises. ``interest`` and ``total`` are rounded to cents independently.

    Parameters
    ----------
    principal : Number
        Amount requested or disbursed.
    monthly_rate_pct : Number
        Interest percent applied per month (15 means 15%).
    duration_months : Number
        Loan duration in months, fractional for weekly products.

    Returns
    -------
    RepaymentPreview
        Clamped principal with rounded interest and total.
    """
    p = non_negative(principal)
    r = non_negative(monthly_rate_pct)
    t = non_negative(duration_months)

    with localcontext(ENGINE_CONTEXT):
        interest = p * (r / HUNDRED) * t
        total = p + interest

    return RepaymentPreview(principal=p, interest=money(interest), total=money(total))


def normalize_duration_months(unit: str, value: Number, weeks_per_month: int = 4) -> Decimal:
    """Convert a product rate's duration to months.

    Weekly durations divide by ``weeks_per_month`` and may be fractional.
    Unknown units are taken as months.
    """
    amount = non_negative(value)
    if str(getattr(unit, "value", unit)).lower() == "week":
        if weeks_per_month <= 0:
            return ZERO
        with localcontext(ENGINE_CONTEXT):
            return amount / to_decimal(weeks_per_month)
    return amount
