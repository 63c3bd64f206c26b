"""Portfolio report for a business over a date range."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from loan_ledger.config import LedgerConfig
from loan_ledger.finance.interest import calculate_simple_interest
from loan_ledger.finance.money import ZERO, to_decimal
from loan_ledger.finance.outstanding import approved_only, outstanding_balance
from loan_ledger.models import Loan, LoanStatus, PaymentStatus
from loan_ledger.store.ledger import LedgerStore

logger = logging.getLogger(__name__)

PORTFOLIO_STATUSES = (LoanStatus.ACTIVE, LoanStatus.DEFAULTED)


@dataclass
class PeriodMetrics:
    """Activity for loans and payments created inside the period."""

    loans_issued: int = 0
    amount_disbursed: Decimal = ZERO
    interest_expected: Decimal = ZERO
    payments_collected: Decimal = ZERO


@dataclass
class PortfolioMetrics:
    """State of the live portfolio at report time."""

    total_active_loans: int = 0
    total_outstanding: Decimal = ZERO
    total_bad_loans: int = 0
    bad_loan_ratio: Decimal = ZERO  # Percent


@dataclass
class ChartPoint:
    """Disbursed and collected amounts for one day."""

    date: date
    disbursed: Decimal = ZERO
    collected: Decimal = ZERO


@dataclass
class ReportMetrics:
    """Business report for a date range."""

    business_id: str
    date_from: date
    date_to: date
    period: PeriodMetrics = field(default_factory=PeriodMetrics)
    portfolio: PortfolioMetrics = field(default_factory=PortfolioMetrics)
    chart_data: list[ChartPoint] = field(default_factory=list)


def expected_interest(loan: Loan) -> Decimal:
    """Snapshot interest, recomputed for loans created before snapshots."""
    if loan.interest_amount is not None:
        return to_decimal(loan.interest_amount)
    return calculate_simple_interest(loan.amount, loan.applied_rate, loan.duration_months).interest


def build_business_report(
    store: LedgerStore,
    business_id: str,
    date_from: date,
    date_to: date,
    now: datetime | None = None,
    config: LedgerConfig | None = None,
) -> ReportMetrics:
    """Build period, portfolio and daily chart metrics for a business.

    Parameters
    ----------
    store : LedgerStore
        Source of loans and payments.
    business_id : str
        Tenant to report on.
    date_from, date_to : date
        Inclusive period bounds.
    now : datetime | None
        Reference time for overdue detection (default: now).
    config : LedgerConfig | None
        Days per month and the bad-loan tolerance.

    Returns
    -------
    ReportMetrics
        Report for the period.
    """
    config = config or LedgerConfig()
    now = now or datetime.now()
    start = datetime.combine(date_from, time.min)
    end = datetime.combine(date_to, time.max)

    loans = store.get_business_loans(business_id)
    payments = store.get_business_payments(business_id)

    new_loans = [l for l in loans if start <= l.created_at <= end]
    collected = [
        p for p in payments if p.status == PaymentStatus.APPROVED and start <= p.created_at <= end
    ]

    period = PeriodMetrics(
        loans_issued=len(new_loans),
        amount_disbursed=sum((to_decimal(l.amount) for l in new_loans), ZERO),
        interest_expected=sum((expected_interest(l) for l in new_loans), ZERO),
        payments_collected=sum((to_decimal(p.amount) for p in collected), ZERO),
    )

    portfolio = PortfolioMetrics()
    for loan in loans:
        if loan.status not in PORTFOLIO_STATUSES:
            continue
        portfolio.total_active_loans += 1

        remaining = outstanding_balance(loan, approved_only(store.get_loan_payments(loan.loan_id)))
        # Overpaid loans do not offset other borrowers' debt
        remaining = max(ZERO, remaining)
        portfolio.total_outstanding += remaining

        term_days = float(to_decimal(loan.duration_months) * config.days_per_month)
        due = loan.created_at + timedelta(days=term_days)
        if now > due and remaining > config.bad_loan_tolerance:
            portfolio.total_bad_loans += 1

    if portfolio.total_active_loans:
        portfolio.bad_loan_ratio = (
            Decimal(portfolio.total_bad_loans) / Decimal(portfolio.total_active_loans) * 100
        )

    chart_data = []
    day = date_from
    while day <= date_to:
        chart_data.append(
            ChartPoint(
                date=day,
                disbursed=sum(
                    (to_decimal(l.amount) for l in new_loans if l.created_at.date() == day), ZERO
                ),
                collected=sum(
                    (to_decimal(p.amount) for p in collected if p.created_at.date() == day), ZERO
                ),
            )
        )
        day += timedelta(days=1)

    logger.info(
        "Report for %s: %d new loans, %d active, outstanding %s",
        business_id,
        period.loans_issued,
        portfolio.total_active_loans,
        portfolio.total_outstanding,
    )

    return ReportMetrics(
        business_id=business_id,
        date_from=date_from,
        date_to=date_to,
        period=period,
        portfolio=portfolio,
        chart_data=chart_data,
    )
