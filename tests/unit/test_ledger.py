"""Unit tests for ledger reconciliation"""

from datetime import date
from decimal import Decimal
from loan_ledger.domain.ledger import is_fully_paid, last_payment_date, next_payment_cap, reconcile
from conftest import make_payment


def test_reconcile_empty_history():
    result = reconcile(Decimal("1000"), [])

    assert result.total_paid == 0
    assert result.remaining_balance == Decimal("1000")
    assert result.progress_percent == 0


def test_reconcile_partial_payments():
    result = reconcile(Decimal("1000"), [make_payment("300"), make_payment("200")])

    assert result.total_paid == Decimal("500")
    assert result.remaining_balance == Decimal("500")
    assert result.progress_percent == 50


def test_reconcile_is_idempotent():
    payments = (make_payment("300"), make_payment("200"))
    assert reconcile(Decimal("1000"), payments) == reconcile(Decimal("1000"), payments)


def test_reconcile_ignores_payment_order():
    first = make_payment("125.50", date(2024, 3, 1), "a")
    second = make_payment("74.50", date(2024, 1, 1), "b")
    third = make_payment("300", date(2024, 2, 1), "c")

    forward = reconcile(Decimal("1000"), [first, second, third])
    shuffled = reconcile(Decimal("1000"), [third, first, second])

    assert forward.total_paid == shuffled.total_paid == Decimal("500.00")
    assert forward.remaining_balance == shuffled.remaining_balance


def test_reconcile_does_not_mutate_history():
    payments = [make_payment("300")]
    reconcile(Decimal("1000"), payments)
    assert len(payments) == 1


def test_reconcile_overpayment_goes_negative():
    """Tolerated overpayment shows as a negative balance, not clamped"""
    result = reconcile(Decimal("100"), [make_payment("100.50")])

    assert result.remaining_balance == Decimal("-0.50")
    assert is_fully_paid(result)


def test_is_fully_paid_only_at_zero_or_below():
    assert is_fully_paid(reconcile(Decimal("100"), [make_payment("100")]))
    assert not is_fully_paid(reconcile(Decimal("100"), [make_payment("99.99")]))


def test_next_payment_cap_is_remaining_balance():
    assert next_payment_cap(Decimal("1000"), [make_payment("300")]) == Decimal("700")
    assert next_payment_cap(Decimal("1000"), []) == Decimal("1000")


def test_last_payment_date_uses_latest_date_not_entry_order():
    payments = [make_payment("10", date(2024, 5, 1)), make_payment("10", date(2024, 2, 1))]
    assert last_payment_date(payments) == date(2024, 5, 1)
    assert last_payment_date([]) is None


def test_reconcile_zero_principal_reports_no_progress():
    """Zero-balance imports must still reconcile"""
    result = reconcile(Decimal("0.00"), [])

    assert result.total_paid == 0
    assert result.remaining_balance == 0
    assert result.progress_percent == 0
    assert is_fully_paid(result)
