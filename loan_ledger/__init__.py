"""Loan ledger and interest/balance engine for multi-tenant lending."""

__version__ = "0.1.0"
