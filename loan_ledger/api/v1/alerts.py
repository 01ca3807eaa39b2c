"""/v1/alerts - loan notifications"""

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from loan_ledger.api.v1.schemas import AlertCreateRequest, AlertListResponse, AlertResponse
from loan_ledger.api.dependencies import get_current_user_id, get_webhook_client, parse_id
from loan_ledger.infrastructure.database.session import get_db
from loan_ledger.infrastructure.database.models import AlertRecord
from loan_ledger.infrastructure.database.repositories import AlertRepository, LoanRepository
from loan_ledger.infrastructure.clients.webhook import ChangeWebhookClient, change_event

router = APIRouter()


def _alert_response(alert: AlertRecord) -> AlertResponse:
    return AlertResponse(
        alert_id=str(alert.id),
        loan_id=str(alert.loan_id),
        type=alert.type,
        message=alert.message,
        severity=alert.severity,
        triggered_at=alert.triggered_at.isoformat(),
        read=alert.read,
        resolved=alert.resolved,
    )


@router.get("/alerts", response_model=AlertListResponse)
def list_alerts(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Retrieve recent alerts, most recently triggered first.

    Returns:
        Up to `limit` alerts plus the count of unread ones among them
    """
    alerts = AlertRepository(db).list_alerts(user_id, limit=limit, unread_only=unread_only)
    items = [_alert_response(a) for a in alerts]
    return AlertListResponse(alerts=items, unread_count=sum(1 for a in items if not a.read))


@router.post("/alerts", response_model=AlertResponse, status_code=201)
def create_alert(
    request_body: AlertCreateRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    webhook_client: ChangeWebhookClient = Depends(get_webhook_client),
):
    """Raise an alert against one of the caller's loans"""
    loan = LoanRepository(db).require_loan(user_id, parse_id(request_body.loan_id, "loan"))

    alert = AlertRepository(db).create_alert(
        user_id=user_id,
        loan_id=loan.id,
        type=request_body.type,
        message=request_body.message,
        severity=request_body.severity,
    )
    db.commit()
    db.refresh(alert)

    response = _alert_response(alert)
    background_tasks.add_task(
        webhook_client.send_change_event,
        change_event("INSERT", "alerts", user_id, response.model_dump(mode="json")),
    )
    return response


@router.post("/alerts/{alert_id}/read", response_model=AlertResponse)
def mark_alert_read(
    alert_id: str,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    webhook_client: ChangeWebhookClient = Depends(get_webhook_client),
):
    alert = AlertRepository(db).mark_read(user_id, parse_id(alert_id, "alert"))
    db.commit()
    db.refresh(alert)

    response = _alert_response(alert)
    background_tasks.add_task(
        webhook_client.send_change_event,
        change_event("UPDATE", "alerts", user_id, response.model_dump(mode="json")),
    )
    return response
