"""In-memory data store for lending entities and loan ledgers."""

from loan_ledger.store.ledger import LedgerStore

__all__ = ["LedgerStore"]
