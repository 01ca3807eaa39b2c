"""POST /v1/loans/{loan_id}/payments - append a manual payment"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from loan_ledger.api.v1.schemas import PaymentCreateRequest, PaymentResponse, PaymentSchema
from loan_ledger.api.v1.loans import build_loan_response
from loan_ledger.api.dependencies import get_current_user_id, get_request_id, get_webhook_client, parse_id
from loan_ledger.config import settings
from loan_ledger.infrastructure.database.session import get_db
from loan_ledger.infrastructure.database.repositories import LoanRepository, to_domain_loan
from loan_ledger.infrastructure.clients.webhook import ChangeWebhookClient, change_event
from loan_ledger.domain.exceptions import LoanValidationError
from loan_ledger.domain.validation import validate_new_payment
from loan_ledger.infrastructure.observability.metrics import payments_recorded_counter, record_validation_rejection
from loan_ledger.infrastructure.observability.logging import log_payment_recorded

router = APIRouter()


@router.post("/loans/{loan_id}/payments", response_model=PaymentResponse, status_code=201)
def add_payment(
    loan_id: str,
    request_body: PaymentCreateRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    webhook_client: ChangeWebhookClient = Depends(get_webhook_client),
):
    """
    Record a payment against a loan.

    Flow:
    1. Lock the loan row and reconcile current history to find the
       remaining balance
    2. Reject non-positive amounts and amounts above the remaining balance
       (plus configured tolerance)
    3. Append to history; earlier payments are never modified
    4. Fan out UPDATE change event for the loan

    The status label is left alone even when the loan is now fully paid.
    """
    request_id = get_request_id(request)
    repo = LoanRepository(db)
    record = repo.require_loan(user_id, parse_id(loan_id, "loan"), for_update=True)
    loan = to_domain_loan(record)

    try:
        payment = validate_new_payment(
            loan.terms.principal,
            loan.payments,
            request_body.amount,
            request_body.paid_on,
            request_body.method,
            note=request_body.note,
            overpayment_tolerance=settings.overpayment_tolerance,
        )
    except LoanValidationError as e:
        record_validation_rejection("add_payment", [issue.field for issue in e.issues])
        raise

    repo.append_payment(record, payment)
    db.commit()
    db.refresh(record)

    loan_response = build_loan_response(record)

    payments_recorded_counter.labels(method=payment.method).inc()
    log_payment_recorded(request_id, user_id, loan_response.loan_id, payment.amount, loan_response.remaining_balance)
    background_tasks.add_task(
        webhook_client.send_change_event,
        change_event("UPDATE", "loans", user_id, loan_response.model_dump(mode="json", by_alias=True)),
    )

    return PaymentResponse(
        payment=PaymentSchema(
            payment_id=payment.payment_id,
            amount=payment.amount,
            paid_on=payment.date,
            method=payment.method,
            note=payment.note,
        ),
        loan=loan_response,
    )
