"""Reporting derived from loans, payments and outstanding balances."""

from loan_ledger.reports.portfolio import (
    ChartPoint,
    PeriodMetrics,
    PortfolioMetrics,
    ReportMetrics,
    build_business_report,
)

__all__ = [
    "ChartPoint",
    "PeriodMetrics",
    "PortfolioMetrics",
    "ReportMetrics",
    "build_business_report",
]
