"""Lending data store with referential integrity and an append-only ledger."""

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from loan_ledger.exceptions import (
    EntityNotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)
from loan_ledger.finance.ledger import calculate_new_balance, parse_entry_type
from loan_ledger.finance.money import ZERO, Number, to_decimal
from loan_ledger.models import (
    Business,
    Customer,
    LedgerEntry,
    LedgerEntryType,
    Loan,
    LoanProduct,
    Payment,
    PaymentStatus,
)


@dataclass
class LedgerStore:
    """In-memory store for lending entities with relationship tracking.

    Ledger entries can only be appended. ``append_entry`` holds a per-loan
    lock while it reads the previous closing balance and writes the new
    entry, so concurrent approvals for one loan cannot both open from the
    same stale balance.
    """

    # Primary entities
    businesses: dict[str, Business] = field(default_factory=dict)
    customers: dict[str, Customer] = field(default_factory=dict)
    products: dict[str, LoanProduct] = field(default_factory=dict)
    loans: dict[str, Loan] = field(default_factory=dict)
    payments: dict[str, Payment] = field(default_factory=dict)

    # Relationship indexes
    _business_customers: dict[str, list[str]] = field(default_factory=dict)
    _business_loans: dict[str, list[str]] = field(default_factory=dict)
    _customer_loans: dict[str, list[str]] = field(default_factory=dict)
    _loan_payments: dict[str, list[str]] = field(default_factory=dict)
    _loan_entries: dict[str, list[LedgerEntry]] = field(default_factory=dict)

    _loan_locks: dict[str, threading.Lock] = field(default_factory=dict)
    _locks_guard: threading.Lock = field(default_factory=threading.Lock)

    def add_business(self, business: Business) -> None:
        """Add a business to the store."""
        if business.created_at is None:
            business.created_at = datetime.now()
        self.businesses[business.business_id] = business
        self._business_customers[business.business_id] = []
        self._business_loans[business.business_id] = []

    def add_customer(self, customer: Customer) -> None:
        """Add a customer to the store."""
        if customer.business_id not in self.businesses:
            raise ReferentialIntegrityError(f"Business {customer.business_id} not found")

        if customer.created_at is None:
            customer.created_at = datetime.now()
        self.customers[customer.customer_id] = customer
        self._business_customers[customer.business_id].append(customer.customer_id)
        self._customer_loans[customer.customer_id] = []

    def add_product(self, product: LoanProduct) -> None:
        """Add a loan product to the store."""
        if product.business_id not in self.businesses:
            raise ReferentialIntegrityError(f"Business {product.business_id} not found")

        self.products[product.product_id] = product

    def add_loan(self, loan: Loan) -> None:
        """Add a loan to the store."""
        if loan.business_id not in self.businesses:
            raise ReferentialIntegrityError(f"Business {loan.business_id} not found")

        if loan.customer_id not in self.customers:
            raise ReferentialIntegrityError(f"Customer {loan.customer_id} not found")

        if loan.product_id and loan.product_id not in self.products:
            raise ReferentialIntegrityError(f"Product {loan.product_id} not found")

        self.loans[loan.loan_id] = loan
        self._business_loans[loan.business_id].append(loan.loan_id)
        self._customer_loans[loan.customer_id].append(loan.loan_id)
        self._loan_payments[loan.loan_id] = []
        self._loan_entries[loan.loan_id] = []

    def add_payment(self, payment: Payment) -> None:
        """Add a payment to the store."""
        if payment.loan_id not in self.loans:
            raise ReferentialIntegrityError(f"Loan {payment.loan_id} not found")

        self.payments[payment.payment_id] = payment
        self._loan_payments[payment.loan_id].append(payment.payment_id)

    def append_entry(
        self,
        loan_id: str,
        entry_type: LedgerEntryType | str,
        amount: Number,
        description: str = "",
        reference_id: str | None = None,
        created_at: datetime | None = None,
    ) -> LedgerEntry:
        """Append a ledger entry, opening at the loan's latest balance.

        Parameters
        ----------
        loan_id : str
            Owning loan.
        entry_type : LedgerEntryType | str
            Transaction type; decides the direction.
        amount : Number
            Transaction size, stored as a magnitude.
        description : str
            Free text shown in statements.
        reference_id : str | None
            Source record, e.g. the approved payment's ID.
        created_at : datetime | None
            Entry timestamp (default: now).

        Returns
        -------
        LedgerEntry
            The appended entry.
        """
        if loan_id not in self.loans:
            raise ReferentialIntegrityError(f"Loan {loan_id} not found")

        kind = parse_entry_type(entry_type)
        if kind is None:
            raise ValidationError(f"Unknown ledger entry type: {entry_type!r}")

        with self._lock_for(loan_id):
            entries = self._loan_entries[loan_id]
            balance_before = entries[-1].balance_after if entries else ZERO
            magnitude = to_decimal(amount).copy_abs()

            entry = LedgerEntry(
                entry_id=uuid.uuid4().hex,
                loan_id=loan_id,
                entry_type=kind,
                amount=magnitude,
                balance_before=balance_before,
                balance_after=calculate_new_balance(balance_before, magnitude, kind),
                created_at=created_at or datetime.now(),
                description=description,
                reference_id=reference_id,
            )
            entries.append(entry)

        return entry

    def _lock_for(self, loan_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._loan_locks.get(loan_id)
            if lock is None:
                lock = self._loan_locks[loan_id] = threading.Lock()
            return lock

    # Lookup methods
    def get_loan(self, loan_id: str) -> Loan:
        """Get a loan or raise ``EntityNotFoundError``."""
        try:
            return self.loans[loan_id]
        except KeyError:
            raise EntityNotFoundError(f"Loan {loan_id} not found") from None

    def get_payment(self, payment_id: str) -> Payment:
        """Get a payment or raise ``EntityNotFoundError``."""
        try:
            return self.payments[payment_id]
        except KeyError:
            raise EntityNotFoundError(f"Payment {payment_id} not found") from None

    def get_customer(self, customer_id: str) -> Customer:
        """Get a customer or raise ``EntityNotFoundError``."""
        try:
            return self.customers[customer_id]
        except KeyError:
            raise EntityNotFoundError(f"Customer {customer_id} not found") from None

    def get_product(self, product_id: str) -> LoanProduct:
        """Get a product or raise ``EntityNotFoundError``."""
        try:
            return self.products[product_id]
        except KeyError:
            raise EntityNotFoundError(f"Product {product_id} not found") from None

    # Query methods
    def get_loan_entries(self, loan_id: str) -> list[LedgerEntry]:
        """Get a loan's ledger entries in creation order."""
        return list(self._loan_entries.get(loan_id, []))

    def latest_balance(self, loan_id: str) -> Decimal:
        """Closing balance of the loan's last ledger entry, or zero."""
        entries = self._loan_entries.get(loan_id)
        return entries[-1].balance_after if entries else ZERO

    def get_loan_payments(
        self, loan_id: str, status: PaymentStatus | None = None
    ) -> list[Payment]:
        """Get a loan's payments, optionally only those in ``status``."""
        payment_ids = self._loan_payments.get(loan_id, [])
        payments = [self.payments[pid] for pid in payment_ids]
        if status is not None:
            payments = [p for p in payments if p.status == status]
        return payments

    def get_customer_loans(self, customer_id: str) -> list[Loan]:
        """Get all loans for a customer."""
        loan_ids = self._customer_loans.get(customer_id, [])
        return [self.loans[lid] for lid in loan_ids]

    def get_business_customers(self, business_id: str) -> list[Customer]:
        """Get all customers of a business."""
        customer_ids = self._business_customers.get(business_id, [])
        return [self.customers[cid] for cid in customer_ids]

    def get_business_loans(self, business_id: str) -> list[Loan]:
        """Get all loans of a business."""
        loan_ids = self._business_loans.get(business_id, [])
        return [self.loans[lid] for lid in loan_ids]

    def get_business_payments(self, business_id: str) -> list[Payment]:
        """Get all payments received by a business."""
        return [p for p in self.payments.values() if p.business_id == business_id]

    def all_entries(self) -> list[LedgerEntry]:
        """All ledger entries, grouped by loan."""
        return [entry for entries in self._loan_entries.values() for entry in entries]

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "businesses": len(self.businesses),
            "customers": len(self.customers),
            "products": len(self.products),
            "loans": len(self.loans),
            "payments": len(self.payments),
            "ledger_entries": sum(len(e) for e in self._loan_entries.values()),
        }
