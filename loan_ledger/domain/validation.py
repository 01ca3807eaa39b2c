"""Input validation for loan terms and payments.

Scoring and reconciliation assume valid input and never re-check it, so
everything a caller supplies goes through here first. Problems are collected
per field and raised together as a LoanValidationError; values are never
clamped into range.
"""

import uuid
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional

from loan_ledger.domain.exceptions import LoanValidationError
from loan_ledger.domain.ledger import next_payment_cap
from loan_ledger.domain.models import (
    LOAN_STATUSES,
    PAYMENT_METHODS,
    LoanTerms,
    PaymentRecord,
    ValidationIssue,
)

# Money columns are Numeric(14, 2); rates are Numeric(6, 3)
CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("999999999999.99")
RATE_STEP = Decimal("0.001")


def parse_decimal(value: Any, field: str, issues: List[ValidationIssue]) -> Optional[Decimal]:
    """Parse a numeric input, recording an issue instead of raising"""
    if value is None or value == "":
        issues.append(ValidationIssue(field, "is required"))
        return None
    if isinstance(value, bool):
        issues.append(ValidationIssue(field, "must be a number"))
        return None
    try:
        parsed = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        issues.append(ValidationIssue(field, "must be a number"))
        return None
    if not parsed.is_finite():
        issues.append(ValidationIssue(field, "must be a finite number"))
        return None
    return parsed


def check_money(value: Decimal, field: str, issues: List[ValidationIssue]) -> bool:
    """Positive amounts must be storable exactly, in whole cents"""
    if value > MAX_AMOUNT:
        issues.append(ValidationIssue(field, f"must be at most {MAX_AMOUNT}"))
        return False
    if value.quantize(CENT) != value:
        issues.append(ValidationIssue(field, "must have at most 2 decimal places"))
        return False
    return True


def validate_status(status: Any) -> str:
    if status not in LOAN_STATUSES:
        raise LoanValidationError(
            [ValidationIssue("status", f"must be one of {', '.join(LOAN_STATUSES)}")]
        )
    return status


def validate_loan_terms(
    principal: Any,
    annual_rate_percent: Any,
    start_date: Optional[date],
    due_date: Optional[date],
    borrower_name: Optional[str] = None,
    require_borrower: bool = False,
) -> LoanTerms:
    """
    Validate raw loan inputs and build LoanTerms.

    Rules:
    - principal > 0, whole cents, within the stored range
    - 0 <= annual rate <= 100, at most 3 decimal places
    - both dates present, due date strictly after start date
    - borrower name non-blank when required

    Raises:
        LoanValidationError: with every failing field
    """
    issues: List[ValidationIssue] = []

    if require_borrower and not (borrower_name or "").strip():
        issues.append(ValidationIssue("borrower_name", "is required"))

    amount = parse_decimal(principal, "principal", issues)
    if amount is not None:
        if amount <= 0:
            issues.append(ValidationIssue("principal", "must be a positive number"))
        elif check_money(amount, "principal", issues):
            amount = amount.quantize(CENT)

    rate = parse_decimal(annual_rate_percent, "annual_rate_percent", issues)
    if rate is not None:
        if not (0 <= rate <= 100):
            issues.append(ValidationIssue("annual_rate_percent", "must be between 0 and 100"))
        elif rate.quantize(RATE_STEP) != rate:
            issues.append(ValidationIssue("annual_rate_percent", "must have at most 3 decimal places"))

    if start_date is None:
        issues.append(ValidationIssue("start_date", "is required"))
    if due_date is None:
        issues.append(ValidationIssue("due_date", "is required"))
    if start_date is not None and due_date is not None and due_date <= start_date:
        issues.append(ValidationIssue("due_date", "must be after start date"))

    if issues:
        raise LoanValidationError(issues)

    return LoanTerms(
        principal=amount,
        annual_rate_percent=rate,
        start_date=start_date,
        due_date=due_date,
    )


def validate_new_payment(
    principal: Decimal,
    history: Iterable[PaymentRecord],
    amount: Any,
    payment_date: Optional[date],
    method: Optional[str],
    note: Optional[str] = None,
    overpayment_tolerance: Decimal = Decimal("0"),
) -> PaymentRecord:
    """
    Validate a payment before it is appended to a loan's history.

    The amount must be positive, in whole cents, and must not exceed the
    remaining balance plus the configured overpayment tolerance. Existing
    history is never re-checked.

    Raises:
        LoanValidationError: with every failing field
    """
    issues: List[ValidationIssue] = []

    value = parse_decimal(amount, "amount", issues)
    if value is not None:
        if value <= 0:
            issues.append(ValidationIssue("amount", "must be a positive number"))
        elif check_money(value, "amount", issues):
            value = value.quantize(CENT)
            cap = next_payment_cap(principal, history)
            if value > cap + overpayment_tolerance:
                issues.append(
                    ValidationIssue("amount", f"exceeds remaining balance of {max(cap, Decimal('0'))}")
                )

    if payment_date is None:
        issues.append(ValidationIssue("date", "is required"))

    if method not in PAYMENT_METHODS:
        issues.append(ValidationIssue("method", f"must be one of {', '.join(PAYMENT_METHODS)}"))

    if issues:
        raise LoanValidationError(issues)

    return PaymentRecord(
        payment_id=str(uuid.uuid4()),
        amount=value,
        date=payment_date,
        method=method,
        note=(note or None),
    )
