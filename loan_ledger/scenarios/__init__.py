"""Scenarios for generating realistic lending data sets."""

from loan_ledger.scenarios.loan_book import LoanBookScenario

__all__ = ["LoanBookScenario"]
