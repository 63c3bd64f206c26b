"""Interest, ledger balance and outstanding balance calculations."""

from loan_ledger.finance.interest import (
    RepaymentPreview,
    calculate_simple_interest,
    normalize_duration_months,
)
from loan_ledger.finance.ledger import (
    CREDIT_TYPES,
    DEBIT_TYPES,
    calculate_new_balance,
    find_chain_breaks,
    replay_balance,
)
from loan_ledger.finance.outstanding import (
    BalanceReconciliation,
    approved_only,
    outstanding_balance,
    reconcile_balances,
)

__all__ = [
    "BalanceReconciliation",
    "CREDIT_TYPES",
    "DEBIT_TYPES",
    "RepaymentPreview",
    "approved_only",
    "calculate_new_balance",
    "calculate_simple_interest",
    "find_chain_breaks",
    "normalize_duration_months",
    "outstanding_balance",
    "reconcile_balances",
    "replay_balance",
]
