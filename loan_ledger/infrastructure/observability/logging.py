"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from loan_ledger.config import settings


class LedgerJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping timestamp, level and service name on every record"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging on stdout"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = LedgerJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_loan_created(request_id: str, user_id: str, loan_id: str, risk_score: int, principal: Decimal) -> None:
    logging.info(
        "Loan created",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "loan_id": loan_id,
            "step": "loan_created",
            "risk_score": risk_score,
            "principal": str(principal),
        },
    )


def log_payment_recorded(
    request_id: str,
    user_id: str,
    loan_id: str,
    amount: Decimal,
    remaining_balance: Decimal,
) -> None:
    """Log an appended payment with the balance left after it"""
    logging.info(
        "Payment recorded",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "loan_id": loan_id,
            "step": "payment_recorded",
            "amount": str(amount),
            "remaining_balance": str(remaining_balance),
        },
    )


def log_import_completed(request_id: str, user_id: str, imported: int, duration_ms: float) -> None:
    """Log outcome of a bank-aggregator liability import"""
    logging.info(
        "Liability import completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "import_complete",
            "loans_imported": imported,
            "duration_ms": duration_ms,
        },
    )
