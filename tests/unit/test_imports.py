"""Unit tests for aggregator liability mapping"""

from datetime import date
from decimal import Decimal
from loan_ledger.domain.imports import import_risk_score, map_liabilities, map_liability
from loan_ledger.domain.models import Liability


TODAY = date(2024, 6, 1)


def _liability(kind: str, **overrides) -> Liability:
    values = dict(
        kind=kind,
        name=None,
        balance=Decimal("1200"),
        annual_rate_percent=Decimal("19.99"),
        origination_date=None,
        next_payment_due_date=None,
        is_overdue=False,
    )
    values.update(overrides)
    return Liability(**values)


def test_import_scores_per_kind():
    assert (import_risk_score("credit", True), import_risk_score("credit", False)) == (75, 30)
    assert (import_risk_score("student", True), import_risk_score("student", False)) == (80, 40)
    assert (import_risk_score("mortgage", True), import_risk_score("mortgage", False)) == (85, 35)


def test_import_score_is_not_terms_based():
    """A huge high-rate card still gets the flat import score"""
    loan = map_liability(_liability("credit", balance=Decimal("500000")), TODAY)
    assert loan.risk_score == 30


def test_credit_defaults():
    loan = map_liability(_liability("credit", origination_date=date(2020, 1, 1)), TODAY)

    assert loan.borrower_name == "Credit Card"
    assert loan.start_date == TODAY
    assert loan.due_date == date(2024, 7, 1)
    assert loan.status == "active"
    assert loan.source_kind == "credit"


def test_overdue_student_loan():
    loan = map_liability(
        _liability(
            "student",
            name="Federal Loan",
            origination_date=date(2018, 9, 1),
            next_payment_due_date=date(2024, 6, 15),
            is_overdue=True,
        ),
        TODAY,
    )

    assert loan.borrower_name == "Federal Loan"
    assert loan.start_date == date(2018, 9, 1)
    assert loan.due_date == date(2024, 6, 15)
    assert loan.status == "overdue"
    assert loan.risk_score == 80


def test_missing_amounts_become_zero():
    loan = map_liability(_liability("mortgage", balance=None, annual_rate_percent=None), TODAY)

    assert loan.borrower_name == "Mortgage"
    assert loan.principal == 0
    assert loan.annual_rate_percent == 0
    assert loan.start_date == TODAY


def test_map_liabilities_keeps_order():
    loans = map_liabilities([_liability("mortgage"), _liability("credit")], TODAY)
    assert [loan.source_kind for loan in loans] == ["mortgage", "credit"]


def test_zero_balance_still_imported():
    loan = map_liability(_liability("credit", balance=Decimal("0")), TODAY)
    assert loan.principal == 0


def test_imported_balance_rounded_to_cents():
    loan = map_liability(_liability("student", balance=Decimal("1234.567")), TODAY)
    assert str(loan.principal) == "1234.57"
