"""Ledger reconciliation - derive balance and progress from payment history"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from loan_ledger.domain.models import PaymentRecord, Reconciliation


def total_paid(payments: Iterable[PaymentRecord]) -> Decimal:
    return sum((p.amount for p in payments), Decimal("0"))


def reconcile(principal: Decimal, payments: Iterable[PaymentRecord]) -> Reconciliation:
    """
    Derive the current financial state of a loan.

    Nothing is stored: callers recompute on every read from the raw
    principal and the append-only history. Manual loans always have a
    positive principal; imported zero-balance liabilities report 0% progress.
    """
    paid = total_paid(payments)
    remaining = principal - paid
    progress = paid / principal * 100 if principal > 0 else Decimal("0")

    return Reconciliation(
        total_paid=paid,
        remaining_balance=remaining,
        progress_percent=progress,
    )


def is_fully_paid(reconciliation: Reconciliation) -> bool:
    """Informational only; never changes the loan's status label"""
    return reconciliation.remaining_balance <= 0


def next_payment_cap(principal: Decimal, payments: Iterable[PaymentRecord]) -> Decimal:
    """Largest amount a new payment may have: the current remaining balance"""
    return principal - total_paid(payments)


def last_payment_date(payments: Iterable[PaymentRecord]) -> Optional[date]:
    """Most recent payment date, regardless of entry order"""
    return max((p.date for p in payments), default=None)
