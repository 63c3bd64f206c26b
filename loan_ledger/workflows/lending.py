"""Lending workflow: applications, approvals, repayments and charges.

This is where the finance engine is invoked: the interest calculator once
per application, the ledger engine (through ``LedgerStore.append_entry``)
for every approved financial event, and the outstanding balance
derivation wherever "what is still owed" is needed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from decimal import Decimal

from loan_ledger.config import LedgerConfig
from loan_ledger.exceptions import InvalidEntityStateError, ValidationError
from loan_ledger.finance.interest import calculate_simple_interest
from loan_ledger.finance.money import ZERO, Number, to_decimal
from loan_ledger.finance.outstanding import (
    BalanceReconciliation,
    outstanding_balance,
    reconcile_balances,
)
from loan_ledger.models import (
    Customer,
    KycStatus,
    LedgerEntry,
    LedgerEntryType,
    Loan,
    LoanStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
    ReconcileAction,
)
from loan_ledger.store.ledger import LedgerStore

logger = logging.getLogger(__name__)

CHARGE_TYPES = frozenset(
    {LedgerEntryType.FEE, LedgerEntryType.PENALTY, LedgerEntryType.ADJUSTMENT}
)
REPAYABLE_STATUSES = (LoanStatus.ACTIVE, LoanStatus.DEFAULTED)
DISBURSED_STATUSES = (LoanStatus.ACTIVE, LoanStatus.DEFAULTED, LoanStatus.PAID)


def _extra(**ids: str) -> dict[str, dict[str, str]]:
    return {"extra": ids}


class LendingWorkflow:
    """Drive loans through their lifecycle against a ``LedgerStore``.

    Parameters
    ----------
    store : LedgerStore
        Store holding the lending entities and ledgers.
    config : LedgerConfig | None
        Calendar settings (days per month, weeks per month).
    """

    def __init__(self, store: LedgerStore, config: LedgerConfig | None = None) -> None:
        self.store = store
        self.config = config or LedgerConfig()

    def submit_kyc(self, customer_id: str) -> Customer:
        """Queue a customer's KYC documents for review.

        Customers who were never reviewed or were rejected may submit.
        """
        customer = self.store.get_customer(customer_id)
        if customer.kyc_status not in (KycStatus.NOT_SUBMITTED, KycStatus.REJECTED):
            raise InvalidEntityStateError(
                f"Customer {customer_id} KYC cannot be submitted from status "
                f"{customer.kyc_status.value}"
            )

        customer.kyc_status = KycStatus.PENDING_REVIEW
        customer.kyc_rejection_reason = None
        logger.info("KYC submitted", extra=_extra(customer_id=customer_id))
        return customer

    def approve_kyc(
        self, customer_id: str, reviewed_by: str, now: datetime | None = None
    ) -> Customer:
        """Approve a customer's pending KYC review."""
        customer = self._pending_kyc(customer_id, "approved")
        customer.kyc_status = KycStatus.APPROVED
        customer.kyc_reviewed_by = reviewed_by
        customer.kyc_reviewed_at = now or datetime.now()
        logger.info("KYC approved by %s", reviewed_by, extra=_extra(customer_id=customer_id))
        return customer

    def reject_kyc(
        self,
        customer_id: str,
        reviewed_by: str,
        reason: str,
        now: datetime | None = None,
    ) -> Customer:
        """Reject a customer's pending KYC review with a reason."""
        customer = self._pending_kyc(customer_id, "rejected")
        customer.kyc_status = KycStatus.REJECTED
        customer.kyc_reviewed_by = reviewed_by
        customer.kyc_reviewed_at = now or datetime.now()
        customer.kyc_rejection_reason = reason
        logger.info("KYC rejected by %s", reviewed_by, extra=_extra(customer_id=customer_id))
        return customer

    def _pending_kyc(self, customer_id: str, outcome: str) -> Customer:
        customer = self.store.get_customer(customer_id)
        if customer.kyc_status != KycStatus.PENDING_REVIEW:
            raise InvalidEntityStateError(
                f"Customer {customer_id} KYC cannot be {outcome} from status "
                f"{customer.kyc_status.value}"
            )
        return customer

    def submit_application(
        self,
        customer_id: str,
        product_id: str,
        rate_id: str,
        amount: Number,
        purpose: str = "",
        created_at: datetime | None = None,
    ) -> Loan:
        """Submit a loan application and fix its financial snapshot.

        Raises
        ------
        ValidationError
            If the amount is not positive or outside the product bounds, or
            the rate does not belong to the product.
        InvalidEntityStateError
            If the product is inactive or requires KYC the customer lacks.
        """
        customer = self.store.get_customer(customer_id)
        product = self.store.get_product(product_id)

        if product.business_id != customer.business_id:
            raise ValidationError(
                f"Product {product_id} does not belong to business {customer.business_id}"
            )
        if not product.is_active:
            raise InvalidEntityStateError(f"Product {product_id} is not active")
        if product.requires_kyc and customer.kyc_status != KycStatus.APPROVED:
            raise InvalidEntityStateError(f"Customer {customer_id} has not passed KYC")

        principal = to_decimal(amount)
        if principal <= ZERO:
            raise ValidationError("Loan amount must be positive")
        if product.min_amount is not None and principal < product.min_amount:
            raise ValidationError(f"Loan amount is below the product minimum of {product.min_amount}")
        if product.max_amount is not None and principal > product.max_amount:
            raise ValidationError(f"Loan amount exceeds the product maximum of {product.max_amount}")

        rate = product.get_rate(rate_id)
        if rate is None:
            raise ValidationError(f"Rate {rate_id} is not offered by product {product_id}")

        duration = rate.duration_months(self.config.weeks_per_month)
        preview = calculate_simple_interest(principal, rate.interest_rate, duration)

        loan = Loan(
            loan_id=uuid.uuid4().hex,
            business_id=customer.business_id,
            customer_id=customer_id,
            product_id=product_id,
            amount=preview.principal,
            applied_rate=to_decimal(rate.interest_rate),
            duration_months=duration,
            status=LoanStatus.PENDING_REVIEW,
            created_at=created_at or datetime.now(),
            interest_amount=preview.interest,
            total_payable_amount=preview.total,
            purpose=purpose,
        )
        self.store.add_loan(loan)

        logger.info(
            "Loan %s submitted: principal=%s interest=%s total=%s",
            loan.loan_id,
            preview.principal,
            preview.interest,
            preview.total,
            extra=_extra(loan_id=loan.loan_id, customer_id=customer_id),
        )
        return loan

    def approve_loan(self, loan_id: str, approved_by: str, now: datetime | None = None) -> Loan:
        """Approve and disburse a pending loan.

        The ledger opens with the principal and the snapshot interest so
        its running balance starts at the snapshot total payable.
        """
        loan = self.store.get_loan(loan_id)
        if loan.status != LoanStatus.PENDING_REVIEW:
            raise InvalidEntityStateError(
                f"Loan {loan_id} cannot be approved from status {loan.status.value}"
            )

        now = now or datetime.now()
        loan.status = LoanStatus.ACTIVE
        loan.approved_at = now
        loan.approved_by = approved_by
        loan.disbursed_at = now
        loan.due_date = now + timedelta(
            days=float(to_decimal(loan.duration_months) * self.config.days_per_month)
        )

        self.store.append_entry(
            loan_id,
            LedgerEntryType.PRINCIPAL_DISBURSED,
            loan.amount,
            description="Principal Disbursement",
            created_at=now,
        )
        interest = loan.snapshot().interest
        if interest > ZERO:
            self.store.append_entry(
                loan_id,
                LedgerEntryType.INTEREST_ACCRUED,
                interest,
                description="Interest for loan term",
                created_at=now,
            )

        logger.info("Loan %s approved by %s", loan_id, approved_by, extra=_extra(loan_id=loan_id))
        return loan

    def reject_loan(self, loan_id: str, reason: str | None = None) -> Loan:
        """Reject a pending loan."""
        loan = self.store.get_loan(loan_id)
        if loan.status != LoanStatus.PENDING_REVIEW:
            raise InvalidEntityStateError(
                f"Loan {loan_id} cannot be rejected from status {loan.status.value}"
            )

        loan.status = LoanStatus.REJECTED
        loan.rejection_reason = reason
        logger.info("Loan %s rejected", loan_id, extra=_extra(loan_id=loan_id))
        return loan

    def submit_payment(
        self,
        loan_id: str,
        amount: Number,
        method: PaymentMethod = PaymentMethod.MOBILE_MONEY,
        provider: str | None = None,
        reference: str | None = None,
        created_at: datetime | None = None,
    ) -> Payment:
        """Record a borrower's repayment for review."""
        loan = self.store.get_loan(loan_id)
        if loan.status not in REPAYABLE_STATUSES:
            raise InvalidEntityStateError(f"Loan {loan_id} is not active or defaulted")

        value = to_decimal(amount)
        if value <= ZERO:
            raise ValidationError("Payment amount must be positive")
        try:
            method = PaymentMethod(method)
        except ValueError:
            raise ValidationError(f"Unknown payment method: {method!r}") from None

        payment = Payment(
            payment_id=uuid.uuid4().hex,
            loan_id=loan_id,
            business_id=loan.business_id,
            amount=value,
            method=method,
            status=PaymentStatus.PENDING,
            created_at=created_at or datetime.now(),
            provider=provider,
            reference=reference,
        )
        self.store.add_payment(payment)
        return payment

    def reconcile_payment(
        self,
        payment_id: str,
        action: ReconcileAction | str,
        reviewed_by: str,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> Payment:
        """Approve or reject a pending payment.

        Approval appends a ``payment_received`` entry and marks the loan
        paid once nothing is outstanding.
        """
        payment = self.store.get_payment(payment_id)
        if payment.status != PaymentStatus.PENDING:
            raise InvalidEntityStateError(
                f"Payment {payment_id} was already {payment.status.value}"
            )

        try:
            action = ReconcileAction(action)
        except ValueError:
            raise ValidationError(f"Unknown reconcile action: {action!r}") from None
        now = now or datetime.now()
        payment.reviewed_by = reviewed_by
        payment.reviewed_at = now

        if action == ReconcileAction.REJECT:
            payment.status = PaymentStatus.REJECTED
            payment.rejection_reason = reason
            logger.info(
                "Payment %s rejected",
                payment_id,
                extra=_extra(loan_id=payment.loan_id, payment_id=payment_id),
            )
            return payment

        description = f"Payment via {payment.method.value}"
        if payment.provider:
            description += f" ({payment.provider})"
        self.store.append_entry(
            payment.loan_id,
            LedgerEntryType.PAYMENT_RECEIVED,
            payment.amount,
            description=description,
            reference_id=payment.payment_id,
            created_at=now,
        )
        payment.status = PaymentStatus.APPROVED

        loan = self.store.get_loan(payment.loan_id)
        remaining = self.outstanding(loan.loan_id)
        if remaining <= ZERO and loan.status in REPAYABLE_STATUSES:
            loan.status = LoanStatus.PAID
            logger.info(
                "Loan %s fully repaid (balance %s)",
                loan.loan_id,
                remaining,
                extra=_extra(loan_id=loan.loan_id),
            )

        logger.info(
            "Payment %s approved for loan %s, outstanding %s",
            payment_id,
            payment.loan_id,
            remaining,
            extra=_extra(loan_id=payment.loan_id, payment_id=payment_id),
        )
        return payment

    def record_charge(
        self,
        loan_id: str,
        entry_type: LedgerEntryType | str,
        amount: Number,
        description: str = "",
        created_at: datetime | None = None,
    ) -> LedgerEntry:
        """Record a fee, penalty or adjustment on a disbursed loan.

        These entries change the ledger balance only; the snapshot-based
        outstanding balance has no term for them.
        """
        try:
            kind = LedgerEntryType(entry_type)
        except ValueError:
            raise ValidationError(f"Unknown ledger entry type: {entry_type!r}") from None
        if kind not in CHARGE_TYPES:
            raise ValidationError(f"{kind.value} cannot be recorded as a manual charge")

        loan = self.store.get_loan(loan_id)
        if loan.status not in DISBURSED_STATUSES:
            raise InvalidEntityStateError(f"Loan {loan_id} has not been disbursed")
        if to_decimal(amount) == ZERO:
            raise ValidationError("Charge amount must be non-zero")

        entry = self.store.append_entry(
            loan_id, kind, amount, description=description, created_at=created_at
        )
        logger.warning(
            "Recorded %s of %s on loan %s; outstanding balance does not include it",
            kind.value,
            entry.amount,
            loan_id,
            extra=_extra(loan_id=loan_id),
        )
        return entry

    def mark_defaulted(self, loan_id: str, now: datetime | None = None) -> Loan:
        """Move an active loan past its due date into default.

        Defaulted loans still accept repayments and charges and stay in
        the live portfolio.
        """
        loan = self.store.get_loan(loan_id)
        if loan.status != LoanStatus.ACTIVE:
            raise InvalidEntityStateError(
                f"Loan {loan_id} cannot default from status {loan.status.value}"
            )

        now = now or datetime.now()
        if loan.due_date is not None and now <= loan.due_date:
            raise InvalidEntityStateError(f"Loan {loan_id} is not past its due date")

        loan.status = LoanStatus.DEFAULTED
        logger.warning(
            "Loan %s defaulted with %s outstanding",
            loan_id,
            self.outstanding(loan_id),
            extra=_extra(loan_id=loan_id),
        )
        return loan

    def close_loan(self, loan_id: str) -> Loan:
        """Close a fully repaid loan."""
        loan = self.store.get_loan(loan_id)
        if loan.status != LoanStatus.PAID:
            raise InvalidEntityStateError(
                f"Loan {loan_id} cannot be closed from status {loan.status.value}"
            )

        loan.status = LoanStatus.CLOSED
        logger.info("Loan %s closed", loan_id, extra=_extra(loan_id=loan_id))
        return loan

    def outstanding(self, loan_id: str) -> Decimal:
        """Outstanding balance from the snapshot and approved payments."""
        loan = self.store.get_loan(loan_id)
        return outstanding_balance(
            loan, self.store.get_loan_payments(loan_id, status=PaymentStatus.APPROVED)
        )

    def reconcile(self, loan_id: str) -> BalanceReconciliation:
        """Compare the outstanding balance with the loan's ledger."""
        loan = self.store.get_loan(loan_id)
        return reconcile_balances(
            loan,
            self.store.get_loan_entries(loan_id),
            self.store.get_loan_payments(loan_id, status=PaymentStatus.APPROVED),
        )
