"""Data access layer for loans, payments, alerts and ESG metrics"""

import uuid
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from loan_ledger.infrastructure.database.models import AlertRecord, ESGMetricRecord, LoanPayment, LoanRecord
from loan_ledger.domain.exceptions import AlertNotFoundError, LoanNotFoundError
from loan_ledger.domain.models import Loan, LoanTerms, PaymentRecord


def to_domain_payment(row: LoanPayment) -> PaymentRecord:
    return PaymentRecord(
        payment_id=str(row.id),
        amount=row.amount,
        date=row.paid_on,
        method=row.method,
        note=row.note,
    )


def to_domain_loan(record: LoanRecord) -> Loan:
    """Convert ORM row to the domain aggregate used by ledger and rollups"""
    return Loan(
        loan_id=str(record.id),
        borrower_name=record.borrower_name,
        terms=LoanTerms(
            principal=record.principal,
            annual_rate_percent=record.interest_rate,
            start_date=record.start_date,
            due_date=record.due_date,
        ),
        status=record.status,
        risk_score=record.risk_score,
        payments=tuple(to_domain_payment(row) for row in record.payments),
    )


class LoanRepository:
    """Repository for loans and their payment history, scoped by owner"""

    def __init__(self, db: Session):
        self.db = db

    def create_loan(
        self,
        user_id: str,
        borrower_name: str,
        terms: LoanTerms,
        risk_score: int,
        status: str = "active",
        notes: Optional[str] = None,
        source: str = "manual",
    ) -> LoanRecord:
        """Persist a new loan with an empty payment history"""
        record = LoanRecord(
            user_id=user_id,
            borrower_name=borrower_name,
            principal=terms.principal,
            interest_rate=terms.annual_rate_percent,
            start_date=terms.start_date,
            due_date=terms.due_date,
            status=status,
            risk_score=risk_score,
            notes=notes,
            source=source,
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return record

    def get_loan(self, user_id: str, loan_id: uuid.UUID, for_update: bool = False) -> Optional[LoanRecord]:
        query = self.db.query(LoanRecord).filter(LoanRecord.id == loan_id, LoanRecord.user_id == user_id)
        if for_update:
            # Held until commit so concurrent payments see each other's history
            query = query.with_for_update()
        return query.first()

    def require_loan(self, user_id: str, loan_id: uuid.UUID, for_update: bool = False) -> LoanRecord:
        """Fetch an owned loan or raise LoanNotFoundError"""
        record = self.get_loan(user_id, loan_id, for_update=for_update)
        if record is None:
            raise LoanNotFoundError(f"Loan {loan_id} not found")
        return record

    def list_loans(self, user_id: str, status: Optional[str] = None) -> List[LoanRecord]:
        """Owned loans, newest first"""
        query = self.db.query(LoanRecord).filter(LoanRecord.user_id == user_id)
        if status is not None:
            query = query.filter(LoanRecord.status == status)
        return query.order_by(LoanRecord.created_at.desc()).all()

    def update_status(self, record: LoanRecord, status: str) -> LoanRecord:
        record.status = status
        self.db.flush()
        return record

    def delete_loan(self, record: LoanRecord) -> None:
        """Delete loan; payments, alerts and ESG metrics cascade"""
        self.db.delete(record)
        self.db.flush()

    def append_payment(self, record: LoanRecord, payment: PaymentRecord) -> LoanPayment:
        """Append to history; existing rows are never touched"""
        row = LoanPayment(
            id=uuid.UUID(payment.payment_id),
            sequence=len(record.payments) + 1,
            amount=payment.amount,
            paid_on=payment.date,
            method=payment.method,
            note=payment.note,
        )
        record.payments.append(row)
        self.db.flush()
        return row


class AlertRepository:
    """Repository for loan alerts"""

    def __init__(self, db: Session):
        self.db = db

    def create_alert(
        self,
        user_id: str,
        loan_id: uuid.UUID,
        type: str,
        message: str,
        severity: str,
    ) -> AlertRecord:
        alert = AlertRecord(
            user_id=user_id,
            loan_id=loan_id,
            type=type,
            message=message,
            severity=severity,
        )
        self.db.add(alert)
        self.db.flush()
        return alert

    def list_alerts(self, user_id: str, limit: int = 50, unread_only: bool = False) -> List[AlertRecord]:
        """Most recently triggered alerts first"""
        query = self.db.query(AlertRecord).filter(AlertRecord.user_id == user_id)
        if unread_only:
            query = query.filter(AlertRecord.read.is_(False))
        return query.order_by(AlertRecord.triggered_at.desc()).limit(limit).all()

    def mark_read(self, user_id: str, alert_id: uuid.UUID) -> AlertRecord:
        alert = (
            self.db.query(AlertRecord)
            .filter(AlertRecord.id == alert_id, AlertRecord.user_id == user_id)
            .first()
        )
        if alert is None:
            raise AlertNotFoundError(f"Alert {alert_id} not found")
        alert.read = True
        self.db.flush()
        return alert


class ESGRepository:
    """Repository for per-loan ESG metrics"""

    def __init__(self, db: Session):
        self.db = db

    def get_for_loan(self, loan_id: uuid.UUID) -> Optional[ESGMetricRecord]:
        return self.db.query(ESGMetricRecord).filter(ESGMetricRecord.loan_id == loan_id).first()

    def upsert(self, loan_id: uuid.UUID, values: Dict[str, Any]) -> ESGMetricRecord:
        """Create metrics for a loan or overwrite the existing row"""
        metrics = self.get_for_loan(loan_id)
        if metrics is None:
            metrics = ESGMetricRecord(loan_id=loan_id, **values)
            self.db.add(metrics)
        else:
            for key, value in values.items():
                setattr(metrics, key, value)
        self.db.flush()
        return metrics
