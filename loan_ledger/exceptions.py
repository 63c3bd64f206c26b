"""Custom exception hierarchy for loan-ledger.

The finance engine never raises; these errors belong to the store,
workflow and configuration layers around it.
"""


class LoanLedgerError(Exception):
    """Base exception for all loan-ledger errors."""


class EntityNotFoundError(LoanLedgerError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class InvalidEntityStateError(LoanLedgerError):
    """Raised when an entity is in an invalid state for the operation."""


class ValidationError(LoanLedgerError):
    """Raised when a business rule rejects caller input."""


class ConfigurationError(LoanLedgerError):
    """Raised when configuration is invalid or missing."""


class SinkError(LoanLedgerError):
    """Raised when a sink operation fails."""
