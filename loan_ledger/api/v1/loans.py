"""/v1/loans - create, list, inspect, relabel and delete loans"""

import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from loan_ledger.api.v1.schemas import (
    LoanCreateRequest,
    LoanListResponse,
    LoanResponse,
    PaymentSchema,
    StatusUpdateRequest,
)
from loan_ledger.api.dependencies import get_current_user_id, get_request_id, get_webhook_client, parse_id
from loan_ledger.infrastructure.database.session import get_db
from loan_ledger.infrastructure.database.models import LoanRecord
from loan_ledger.infrastructure.database.repositories import LoanRepository, to_domain_loan
from loan_ledger.infrastructure.clients.webhook import ChangeWebhookClient, change_event
from loan_ledger.domain.exceptions import LoanValidationError
from loan_ledger.domain.ledger import is_fully_paid, last_payment_date, reconcile
from loan_ledger.domain.scoring import calculate_risk_score, risk_band
from loan_ledger.domain.validation import validate_loan_terms, validate_status
from loan_ledger.infrastructure.observability.metrics import (
    record_loan_created,
    record_validation_rejection,
    status_transition_counter,
)
from loan_ledger.infrastructure.observability.logging import log_loan_created

router = APIRouter()


def build_loan_response(record: LoanRecord) -> LoanResponse:
    """Serialize a loan, reconciling its history on the way out"""
    loan = to_domain_loan(record)
    reconciliation = reconcile(loan.terms.principal, loan.payments)

    return LoanResponse(
        loan_id=loan.loan_id,
        borrower_name=loan.borrower_name,
        principal=loan.terms.principal,
        annual_rate_percent=loan.terms.annual_rate_percent,
        start_date=loan.terms.start_date,
        due_date=loan.terms.due_date,
        status=loan.status,
        risk_score=loan.risk_score,
        risk_band=risk_band(loan.risk_score),
        source=record.source,
        notes=record.notes,
        total_paid=reconciliation.total_paid,
        remaining_balance=reconciliation.remaining_balance,
        progress_percent=float(reconciliation.progress_percent),
        is_fully_paid=is_fully_paid(reconciliation),
        last_payment_date=last_payment_date(loan.payments),
        payments=[
            PaymentSchema(
                payment_id=p.payment_id,
                amount=p.amount,
                paid_on=p.date,
                method=p.method,
                note=p.note,
            )
            for p in loan.payments
        ],
        created_at=record.created_at.isoformat() if record.created_at else None,
    )


@router.post("/loans", response_model=LoanResponse, status_code=201)
def create_loan(
    request_body: LoanCreateRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    webhook_client: ChangeWebhookClient = Depends(get_webhook_client),
):
    """
    Create a loan with a snapshot risk score.

    Flow:
    1. Validate terms (every failing field reported together)
    2. Score terms once; the score is never recomputed
    3. Persist with an empty payment history
    4. Fan out INSERT change event
    """
    request_id = get_request_id(request)

    try:
        terms = validate_loan_terms(
            request_body.principal,
            request_body.annual_rate_percent,
            request_body.start_date,
            request_body.due_date,
            borrower_name=request_body.borrower_name,
            require_borrower=True,
        )
        status = validate_status(request_body.status)
    except LoanValidationError as e:
        record_validation_rejection("create_loan", [issue.field for issue in e.issues])
        raise

    risk_score = calculate_risk_score(
        terms.principal,
        terms.annual_rate_percent,
        terms.start_date,
        terms.due_date,
    )

    try:
        record = LoanRepository(db).create_loan(
            user_id=user_id,
            borrower_name=request_body.borrower_name.strip(),
            terms=terms,
            risk_score=risk_score,
            status=status,
            notes=request_body.notes,
        )
        db.commit()
        db.refresh(record)
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to create loan: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    response = build_loan_response(record)

    record_loan_created("manual", risk_score)
    log_loan_created(request_id, user_id, response.loan_id, risk_score, terms.principal)
    background_tasks.add_task(
        webhook_client.send_change_event,
        change_event("INSERT", "loans", user_id, response.model_dump(mode="json", by_alias=True)),
    )

    return response


@router.get("/loans", response_model=LoanListResponse)
def list_loans(
    status: Optional[str] = Query(None, description="Filter by status label"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the caller's loans, newest first, each freshly reconciled"""
    if status is not None:
        validate_status(status)

    records = LoanRepository(db).list_loans(user_id, status=status)
    return LoanListResponse(loans=[build_loan_response(r) for r in records])


@router.get("/loans/{loan_id}", response_model=LoanResponse)
def get_loan(
    loan_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Retrieve a loan with its payment history.

    Returns:
        Loan with payments in the order they were entered
    """
    record = LoanRepository(db).require_loan(user_id, parse_id(loan_id, "loan"))
    return build_loan_response(record)


@router.patch("/loans/{loan_id}/status", response_model=LoanResponse)
def update_loan_status(
    loan_id: str,
    request_body: StatusUpdateRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    webhook_client: ChangeWebhookClient = Depends(get_webhook_client),
):
    """
    Set the status label explicitly.

    The label is independent of the ledger: a loan may be marked paid with a
    balance outstanding, and full repayment does not relabel it.
    """
    status = validate_status(request_body.status)

    repo = LoanRepository(db)
    record = repo.require_loan(user_id, parse_id(loan_id, "loan"))
    previous = record.status
    repo.update_status(record, status)
    db.commit()
    db.refresh(record)

    status_transition_counter.labels(from_status=previous, to_status=status).inc()

    response = build_loan_response(record)
    background_tasks.add_task(
        webhook_client.send_change_event,
        change_event("UPDATE", "loans", user_id, response.model_dump(mode="json", by_alias=True)),
    )
    return response


@router.delete("/loans/{loan_id}", status_code=204)
def delete_loan(
    loan_id: str,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    webhook_client: ChangeWebhookClient = Depends(get_webhook_client),
):
    """Delete a loan along with its payments, alerts and ESG metrics"""
    repo = LoanRepository(db)
    record = repo.require_loan(user_id, parse_id(loan_id, "loan"))
    deleted_id = str(record.id)
    repo.delete_loan(record)
    db.commit()

    background_tasks.add_task(
        webhook_client.send_change_event,
        change_event("DELETE", "loans", user_id, {"loan_id": deleted_id}),
    )
    return Response(status_code=204)
