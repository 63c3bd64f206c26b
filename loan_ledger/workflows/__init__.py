"""Workflows that call the finance engine on loan lifecycle events."""

from loan_ledger.workflows.lending import LendingWorkflow

__all__ = ["LendingWorkflow"]
