"""Map bank-aggregator liabilities into loan records.

Imported loans get a coarse, hardcoded risk score that only answers "is this
external account overdue". It is deliberately separate from
calculate_risk_score and the two are never mixed.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from loan_ledger.domain.models import ImportedLoan, Liability
from loan_ledger.domain.validation import CENT
from loan_ledger.utils.date_utils import add_days

# kind -> (score when overdue, score otherwise)
IMPORT_RISK_SCORES: Dict[str, Tuple[int, int]] = {
    "credit": (75, 30),
    "student": (80, 40),
    "mortgage": (85, 35),
}

DEFAULT_NAMES = {
    "credit": "Credit Card",
    "student": "Student Loan",
    "mortgage": "Mortgage",
}

DEFAULT_DUE_IN_DAYS = 30


def import_risk_score(kind: str, is_overdue: bool) -> int:
    """Fixed score per liability kind, bumped when the aggregator flags it overdue"""
    overdue_score, current_score = IMPORT_RISK_SCORES[kind]
    return overdue_score if is_overdue else current_score


def map_liability(liability: Liability, today: date) -> ImportedLoan:
    # Credit lines have no origination date; they start on the import day
    start = today if liability.kind == "credit" else (liability.origination_date or today)
    due = liability.next_payment_due_date or add_days(today, DEFAULT_DUE_IN_DAYS)

    return ImportedLoan(
        borrower_name=liability.name or DEFAULT_NAMES[liability.kind],
        principal=(liability.balance or Decimal("0")).quantize(CENT),
        annual_rate_percent=liability.annual_rate_percent or Decimal("0"),
        start_date=start,
        due_date=due,
        status="overdue" if liability.is_overdue else "active",
        risk_score=import_risk_score(liability.kind, liability.is_overdue),
        source_kind=liability.kind,
    )


def map_liabilities(liabilities: Iterable[Liability], today: date) -> List[ImportedLoan]:
    """Map every liability, keeping aggregator order (credit, student, mortgage)"""
    return [map_liability(liability, today) for liability in liabilities]
