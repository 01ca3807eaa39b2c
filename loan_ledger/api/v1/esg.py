"""/v1/loans/{loan_id}/esg - manually entered ESG metadata"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from loan_ledger.api.v1.schemas import ESGMetricsRequest, ESGMetricsResponse
from loan_ledger.api.dependencies import get_current_user_id, parse_id
from loan_ledger.infrastructure.database.session import get_db
from loan_ledger.infrastructure.database.models import ESGMetricRecord
from loan_ledger.infrastructure.database.repositories import ESGRepository, LoanRepository

router = APIRouter()


def _esg_response(metrics: ESGMetricRecord) -> ESGMetricsResponse:
    updated = metrics.updated_at or metrics.created_at
    return ESGMetricsResponse(
        loan_id=str(metrics.loan_id),
        esg_score=metrics.esg_score,
        environmental_score=metrics.environmental_score,
        social_score=metrics.social_score,
        governance_score=metrics.governance_score,
        carbon_footprint=metrics.carbon_footprint,
        notes=metrics.notes,
        updated_at=updated.isoformat() if updated else None,
    )


@router.get("/loans/{loan_id}/esg", response_model=ESGMetricsResponse)
def get_esg_metrics(
    loan_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    loan = LoanRepository(db).require_loan(user_id, parse_id(loan_id, "loan"))
    metrics = ESGRepository(db).get_for_loan(loan.id)
    if metrics is None:
        raise HTTPException(status_code=404, detail="ESG metrics not recorded")
    return _esg_response(metrics)


@router.put("/loans/{loan_id}/esg", response_model=ESGMetricsResponse)
def put_esg_metrics(
    loan_id: str,
    request_body: ESGMetricsRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create or overwrite the loan's ESG metrics"""
    loan = LoanRepository(db).require_loan(user_id, parse_id(loan_id, "loan"))
    metrics = ESGRepository(db).upsert(loan.id, request_body.model_dump())
    db.commit()
    db.refresh(metrics)
    return _esg_response(metrics)
