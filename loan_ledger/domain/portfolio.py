"""Portfolio rollups - cross-loan and per-borrower aggregates.

Everything is refolded from the full loan collection on each call; there are
no running totals to keep in sync.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from loan_ledger.domain.ledger import reconcile
from loan_ledger.domain.models import (
    LOAN_STATUSES,
    BorrowerSummary,
    Loan,
    MonthlyPrincipal,
    PortfolioSummary,
    RiskRanking,
)
from loan_ledger.utils.date_utils import month_key

OUTSTANDING_STATUSES = ("active", "overdue")


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def status_distribution(loans: Iterable[Loan]) -> Dict[str, int]:
    distribution = {status: 0 for status in LOAN_STATUSES}
    for loan in loans:
        distribution[loan.status] = distribution.get(loan.status, 0) + 1
    return distribution


def top_risk_loans(loans: Iterable[Loan], limit: int = 10) -> List[RiskRanking]:
    """Highest risk scores first; ties keep collection order"""
    ranked = sorted(loans, key=lambda loan: loan.risk_score, reverse=True)
    return [
        RiskRanking(loan_id=loan.loan_id, borrower_name=loan.borrower_name, risk_score=loan.risk_score)
        for loan in ranked[:limit]
    ]


def principal_by_month(loans: Iterable[Loan]) -> List[MonthlyPrincipal]:
    """Principal originated per start month, oldest month first"""
    totals: Dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for loan in loans:
        totals[month_key(loan.terms.start_date)] += loan.terms.principal
    return [MonthlyPrincipal(month=month, amount=totals[month]) for month in sorted(totals)]


def summarize_portfolio(loans: Iterable[Loan], top_n: int = 10) -> PortfolioSummary:
    """
    Aggregate a user's loans for the dashboard.

    An empty collection yields zero counts, zero principal and a mean risk
    score of 0.
    """
    loans = list(loans)

    return PortfolioSummary(
        total_loans=len(loans),
        total_principal=sum((loan.terms.principal for loan in loans), Decimal("0")),
        overdue_count=sum(1 for loan in loans if loan.status == "overdue"),
        average_risk_score=_mean([loan.risk_score for loan in loans]),
        status_distribution=status_distribution(loans),
        top_risk=top_risk_loans(loans, top_n),
        principal_by_month=principal_by_month(loans),
    )


def summarize_borrower(borrower_name: str, loans: Iterable[Loan]) -> Optional[BorrowerSummary]:
    """
    Aggregate the loans held by one borrower.

    - total_outstanding: reconciled remaining balance of active/overdue loans
    - total_paid: principal of loans labelled paid

    Returns None when the borrower has no loans in the collection.
    """
    held = [loan for loan in loans if loan.borrower_name == borrower_name]
    if not held:
        return None

    outstanding = sum(
        (
            reconcile(loan.terms.principal, loan.payments).remaining_balance
            for loan in held
            if loan.status in OUTSTANDING_STATUSES
        ),
        Decimal("0"),
    )
    paid = [loan for loan in held if loan.status == "paid"]

    return BorrowerSummary(
        borrower_name=borrower_name,
        total_loans=len(held),
        total_borrowed=sum((loan.terms.principal for loan in held), Decimal("0")),
        total_outstanding=outstanding,
        total_paid=sum((loan.terms.principal for loan in paid), Decimal("0")),
        active_count=sum(1 for loan in held if loan.status == "active"),
        overdue_count=sum(1 for loan in held if loan.status == "overdue"),
        paid_count=len(paid),
        average_risk_score=_mean([loan.risk_score for loan in held]),
        average_interest_rate=_mean([float(loan.terms.annual_rate_percent) for loan in held]),
    )


def summarize_borrowers(loans: Iterable[Loan]) -> List[BorrowerSummary]:
    """Per-borrower rollups ordered by borrower name"""
    loans = list(loans)
    names = sorted({loan.borrower_name for loan in loans})
    return [summarize_borrower(name, loans) for name in names]
