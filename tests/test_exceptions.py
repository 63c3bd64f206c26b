"""Tests for custom exception hierarchy."""

import pytest

from loan_ledger.exceptions import (
    ConfigurationError,
    EntityNotFoundError,
    InvalidEntityStateError,
    LoanLedgerError,
    ReferentialIntegrityError,
    SinkError,
    ValidationError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_loan_ledger_error_is_exception(self) -> None:
        assert isinstance(LoanLedgerError("test"), Exception)

    @pytest.mark.parametrize(
        "error_class",
        [
            EntityNotFoundError,
            InvalidEntityStateError,
            ValidationError,
            ConfigurationError,
            SinkError,
        ],
    )
    def test_is_loan_ledger_error(self, error_class: type) -> None:
        assert isinstance(error_class("test"), LoanLedgerError)

    def test_referential_integrity_is_entity_not_found(self) -> None:
        err = ReferentialIntegrityError("test")
        assert isinstance(err, EntityNotFoundError)
        assert isinstance(err, LoanLedgerError)

    def test_validation_is_not_state_error(self) -> None:
        assert not isinstance(ValidationError("test"), InvalidEntityStateError)

    def test_exception_message(self) -> None:
        err = ReferentialIntegrityError("Customer cust-001 not found")
        assert str(err) == "Customer cust-001 not found"

    def test_catch_by_base(self) -> None:
        with pytest.raises(LoanLedgerError):
            raise InvalidEntityStateError("Loan loan-1 is not active")
