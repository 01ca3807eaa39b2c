"""/v1/imports - pull external liabilities from the bank aggregator"""

import time
import logging
from datetime import date
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from loan_ledger.api.v1.schemas import LiabilityImportRequest, LiabilityImportResponse, LinkTokenResponse
from loan_ledger.api.v1.loans import build_loan_response
from loan_ledger.api.dependencies import get_aggregator_client, get_current_user_id, get_request_id, get_webhook_client
from loan_ledger.infrastructure.database.session import get_db
from loan_ledger.infrastructure.database.repositories import LoanRepository
from loan_ledger.infrastructure.clients.aggregator import AggregatorClient
from loan_ledger.infrastructure.clients.webhook import ChangeWebhookClient, change_event
from loan_ledger.domain.imports import map_liabilities
from loan_ledger.domain.models import LoanTerms
from loan_ledger.domain.exceptions import AggregatorError, AggregatorNotConfiguredError
from loan_ledger.infrastructure.observability.metrics import aggregator_failures_counter, record_loan_created
from loan_ledger.infrastructure.observability.logging import log_import_completed

router = APIRouter()


@router.post("/imports/link-token", response_model=LinkTokenResponse)
async def create_link_token(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    aggregator: AggregatorClient = Depends(get_aggregator_client),
):
    """Issue a link token so the client can open the bank connection flow"""
    request_id = get_request_id(request)

    try:
        link_token = await aggregator.create_link_token(user_id)
    except AggregatorNotConfiguredError as e:
        logging.error(f"Aggregator not configured: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Bank aggregation not configured")
    except AggregatorError as e:
        aggregator_failures_counter.labels(operation="link_token").inc()
        logging.error(f"Aggregator error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail="Failed to create link token")

    return LinkTokenResponse(link_token=link_token)


@router.post("/imports/liabilities", response_model=LiabilityImportResponse, status_code=201)
async def import_liabilities(
    request_body: LiabilityImportRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    aggregator: AggregatorClient = Depends(get_aggregator_client),
    webhook_client: ChangeWebhookClient = Depends(get_webhook_client),
):
    """
    Import credit, student-loan and mortgage liabilities as loans.

    Flow:
    1. Exchange the public token for an access token
    2. Fetch liabilities
    3. Map each to a loan with the import risk heuristic (not RiskScorer)
    4. Persist all imported loans in one transaction
    5. Fan out INSERT change events
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        access_token = await aggregator.exchange_public_token(request_body.public_token)
        liabilities = await aggregator.get_liabilities(access_token)

        imported = map_liabilities(liabilities, date.today())

        repo = LoanRepository(db)
        records = [
            repo.create_loan(
                user_id=user_id,
                borrower_name=item.borrower_name,
                terms=LoanTerms(
                    principal=item.principal,
                    annual_rate_percent=item.annual_rate_percent,
                    start_date=item.start_date,
                    due_date=item.due_date,
                ),
                risk_score=item.risk_score,
                status=item.status,
                source=item.source_kind,
            )
            for item in imported
        ]
        db.commit()

    except AggregatorNotConfiguredError as e:
        db.rollback()
        logging.error(f"Aggregator not configured: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Bank aggregation not configured")

    except AggregatorError as e:
        aggregator_failures_counter.labels(operation="import").inc()
        db.rollback()
        logging.error(f"Aggregator error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail="Failed to fetch liabilities")

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    loans = []
    for record in records:
        db.refresh(record)
        response = build_loan_response(record)
        loans.append(response)
        record_loan_created(record.source, record.risk_score)
        background_tasks.add_task(
            webhook_client.send_change_event,
            change_event("INSERT", "loans", user_id, response.model_dump(mode="json", by_alias=True)),
        )

    duration_ms = (time.time() - start_time) * 1000
    log_import_completed(request_id, user_id, len(loans), duration_ms)

    return LiabilityImportResponse(loans_imported=len(loans), loans=loans)
