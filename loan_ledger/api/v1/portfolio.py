"""GET /v1/portfolio - dashboard rollups recomputed from the caller's loans"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from loan_ledger.api.v1.schemas import (
    BorrowerListResponse,
    BorrowerSummarySchema,
    MonthlyPrincipalSchema,
    PortfolioResponse,
    RiskRankingSchema,
)
from loan_ledger.api.dependencies import get_current_user_id
from loan_ledger.infrastructure.database.session import get_db
from loan_ledger.infrastructure.database.repositories import LoanRepository, to_domain_loan
from loan_ledger.domain.models import BorrowerSummary
from loan_ledger.domain.portfolio import summarize_borrower, summarize_borrowers, summarize_portfolio
from loan_ledger.domain.scoring import risk_band

router = APIRouter()


def _borrower_schema(summary: BorrowerSummary) -> BorrowerSummarySchema:
    return BorrowerSummarySchema(
        borrower_name=summary.borrower_name,
        total_loans=summary.total_loans,
        total_borrowed=summary.total_borrowed,
        total_outstanding=summary.total_outstanding,
        total_paid=summary.total_paid,
        active_count=summary.active_count,
        overdue_count=summary.overdue_count,
        paid_count=summary.paid_count,
        average_risk_score=summary.average_risk_score,
        average_interest_rate=summary.average_interest_rate,
        risk_band=risk_band(summary.average_risk_score),
    )


def _load_loans(db: Session, user_id: str):
    return [to_domain_loan(r) for r in LoanRepository(db).list_loans(user_id)]


@router.get("/portfolio", response_model=PortfolioResponse)
def get_portfolio(
    top: int = Query(10, ge=1, le=100, description="Size of the risk leaderboard"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Portfolio totals, status mix, riskiest loans and monthly originations.

    Returns zeros for an empty portfolio.
    """
    summary = summarize_portfolio(_load_loans(db, user_id), top_n=top)

    return PortfolioResponse(
        total_loans=summary.total_loans,
        total_principal=summary.total_principal,
        overdue_count=summary.overdue_count,
        average_risk_score=summary.average_risk_score,
        status_distribution=summary.status_distribution,
        top_risk=[
            RiskRankingSchema(loan_id=r.loan_id, borrower_name=r.borrower_name, risk_score=r.risk_score)
            for r in summary.top_risk
        ],
        principal_by_month=[
            MonthlyPrincipalSchema(month=m.month, amount=m.amount) for m in summary.principal_by_month
        ],
    )


@router.get("/portfolio/borrowers", response_model=BorrowerListResponse)
def list_borrowers(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Rollup per borrower, ordered by name"""
    summaries = summarize_borrowers(_load_loans(db, user_id))
    return BorrowerListResponse(borrowers=[_borrower_schema(s) for s in summaries])


@router.get("/portfolio/borrowers/{borrower_name}", response_model=BorrowerSummarySchema)
def get_borrower(
    borrower_name: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    summary = summarize_borrower(borrower_name, _load_loans(db, user_id))
    if summary is None:
        raise HTTPException(status_code=404, detail="Borrower not found")
    return _borrower_schema(summary)
