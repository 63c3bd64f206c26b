"""Loan book scenario: a lender's portfolio driven through the workflow."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from loan_ledger.config import LedgerConfig, ScenarioConfig
from loan_ledger.finance.ledger import find_chain_breaks
from loan_ledger.finance.money import ZERO, money
from loan_ledger.generators import (
    BusinessGenerator,
    CustomerGenerator,
    PaymentPlanGenerator,
    ProductGenerator,
)
from loan_ledger.models import (
    KycStatus,
    LedgerEntryType,
    LoanStatus,
    ReconcileAction,
)
from loan_ledger.store.ledger import LedgerStore
from loan_ledger.workflows.lending import DISBURSED_STATUSES, LendingWorkflow

logger = logging.getLogger(__name__)

ADMIN_USER = "admin-scenario"


class LoanBookScenario:
    """Generate a single lender's loan book.

    This scenario creates:
    - One business with a product catalogue
    - Customers at various KYC stages
    - Applications, approvals and rejections through ``LendingWorkflow``
    - Repayments that are approved or rejected during reconciliation
    - Occasional late fees recorded on the ledger
    - Defaults for loans left unpaid past their due date
    """

    def __init__(
        self,
        num_customers: int = 50,
        approval_rate: float = 0.80,
        repayment_rate: float = 0.70,
        fee_rate: float = 0.05,
        seed: int | None = None,
        *,
        config: ScenarioConfig | None = None,
        ledger_config: LedgerConfig | None = None,
    ) -> None:
        """Initialize loan book scenario.

        Parameters
        ----------
        num_customers : int
            Number of customers to onboard.
        approval_rate : float
            Share of applications approved (0.0 to 1.0).
        repayment_rate : float
            Share of approved loans repaid in full; the rest are partly paid.
        fee_rate : float
            Share of approved loans that get a late fee.
        seed : int | None
            Random seed for reproducibility.
        config : ScenarioConfig | None
            Optional scenario configuration. If provided, overrides the
            rate and size arguments.
        ledger_config : LedgerConfig | None
            Calendar settings passed to the workflow.
        """
        self.config = config
        if config is not None:
            num_customers = config.num_customers
            approval_rate = config.approval_rate
            repayment_rate = config.repayment_rate
            fee_rate = config.fee_rate

        self.num_customers = num_customers
        self.approval_rate = approval_rate
        self.repayment_rate = repayment_rate
        self.fee_rate = fee_rate
        self.seed = seed

        if seed is not None:
            random.seed(seed)

        self.store = LedgerStore()
        self.workflow = LendingWorkflow(self.store, ledger_config)
        self._business_gen = BusinessGenerator(seed=seed)
        self._customer_gen = CustomerGenerator(seed=seed)
        self._product_gen = ProductGenerator(seed=seed)
        self._plan_gen = PaymentPlanGenerator(seed=seed)

    def generate(self) -> LedgerStore:
        """Generate all data for the loan book.

        Returns
        -------
        LedgerStore
            Store containing all generated data.
        """
        logger.info("Starting loan book scenario: %d customers", self.num_customers)

        business = self._business_gen.generate()
        self.store.add_business(business)
        products = self._product_gen.generate_catalogue(business.business_id)
        for product in products:
            self.store.add_product(product)

        for customer in self._customer_gen.generate_batch(business.business_id, self.num_customers):
            self.store.add_customer(customer)

            eligible = [
                p for p in products if not p.requires_kyc or customer.kyc_status == KycStatus.APPROVED
            ]
            if not eligible:
                continue

            product = random.choice(eligible)
            rate = random.choice(product.rates)
            applied_at = datetime.now() - timedelta(days=random.randint(10, 180))
            loan = self.workflow.submit_application(
                customer.customer_id,
                product.product_id,
                rate.rate_id,
                self._product_gen.pick_amount(product),
                purpose=random.choice(["stock", "school fees", "rent", "medical", "equipment"]),
                created_at=applied_at,
            )

            if random.random() > self.approval_rate:
                self.workflow.reject_loan(loan.loan_id, reason="Affordability check failed")
                continue

            approved_at = applied_at + timedelta(days=1)
            self.workflow.approve_loan(loan.loan_id, ADMIN_USER, now=approved_at)

            if random.random() < self.fee_rate:
                self.workflow.record_charge(
                    loan.loan_id,
                    LedgerEntryType.FEE,
                    money(loan.amount * Decimal("0.02")),
                    description="Late payment fee",
                    created_at=approved_at + timedelta(days=5),
                )

            self._repay(loan.loan_id, loan.snapshot().total, approved_at)

            if loan.status == LoanStatus.ACTIVE and loan.due_date < datetime.now():
                self.workflow.mark_defaulted(loan.loan_id)

        logger.info(
            "Generated %d loans with %d payments and %d ledger entries",
            len(self.store.loans),
            len(self.store.payments),
            self.store.summary()["ledger_entries"],
        )

        return self.store

    def _repay(self, loan_id: str, total: Decimal, start: datetime) -> None:
        """Submit and reconcile repayments for an approved loan."""
        if random.random() < self.repayment_rate:
            target = total
        else:
            target = money(total * Decimal(str(round(random.uniform(0.1, 0.8), 2))))

        paid_at = start
        for amount, method, provider in self._plan_gen.generate(target):
            paid_at += timedelta(days=random.randint(3, 14))
            payment = self.workflow.submit_payment(
                loan_id, amount, method=method, provider=provider, created_at=paid_at
            )

            # Mistyped references get rejected and resubmitted
            if random.random() < 0.05:
                self.workflow.reconcile_payment(
                    payment.payment_id,
                    ReconcileAction.REJECT,
                    ADMIN_USER,
                    reason="Reference not found",
                    now=paid_at,
                )
                payment = self.workflow.submit_payment(
                    loan_id, amount, method=method, provider=provider, created_at=paid_at
                )

            self.workflow.reconcile_payment(
                payment.payment_id, ReconcileAction.APPROVE, ADMIN_USER, now=paid_at
            )
            if self.store.get_loan(loan_id).status != LoanStatus.ACTIVE:
                break

    def export(self, sinks: list[Any]) -> None:
        """Export generated data to sinks.

        Parameters
        ----------
        sinks : list[Any]
            List of sink instances (ConsoleSink, JsonFileSink).
        """
        for sink in sinks:
            sink.write_batch("businesses", list(self.store.businesses.values()))
            sink.write_batch("customers", list(self.store.customers.values()))
            sink.write_batch("products", list(self.store.products.values()))
            sink.write_batch("loans", list(self.store.loans.values()))
            sink.write_batch("payments", list(self.store.payments.values()))
            sink.write_batch("ledger", self.store.all_entries())

        logger.info("Exported loan book to %d sinks", len(sinks))

    def get_book_summary(self) -> dict[str, Any]:
        """Get summary statistics for the loan book.

        Returns
        -------
        dict[str, Any]
            Loan book summary statistics.
        """
        loans = list(self.store.loans.values())
        if not loans:
            return {}

        status_counts: dict[str, int] = {}
        for loan in loans:
            status_counts[loan.status.value] = status_counts.get(loan.status.value, 0) + 1

        disbursed = [l for l in loans if l.status in DISBURSED_STATUSES]
        outstanding = sum(
            (max(ZERO, self.workflow.outstanding(l.loan_id)) for l in disbursed), ZERO
        )
        drifted = sum(1 for l in disbursed if not self.workflow.reconcile(l.loan_id).is_consistent)
        broken = sum(
            1 for l in disbursed if find_chain_breaks(self.store.get_loan_entries(l.loan_id))
        )

        return {
            "total_loans": len(loans),
            "loan_status_distribution": status_counts,
            "total_principal": float(sum((l.amount for l in disbursed), ZERO)),
            "total_outstanding": float(outstanding),
            "loans_with_ledger_drift": drifted,
            "loans_with_chain_breaks": broken,
        }
