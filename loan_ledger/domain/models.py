"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

LOAN_STATUSES = ("active", "overdue", "paid", "defaulted")
PAYMENT_METHODS = ("bank_transfer", "check", "cash", "credit_card", "other")
ALERT_SEVERITIES = ("low", "medium", "high")
LIABILITY_KINDS = ("credit", "student", "mortgage")


@dataclass(frozen=True)
class ValidationIssue:
    """Single rejection reason tied to an input field"""

    field: str
    message: str


@dataclass(frozen=True)
class LoanTerms:
    """Terms fixed at loan creation"""

    principal: Decimal
    annual_rate_percent: Decimal
    start_date: date
    due_date: date


@dataclass(frozen=True)
class PaymentRecord:
    """Single manual payment against a loan (append-only)"""

    payment_id: str
    amount: Decimal
    date: date
    method: str  # one of PAYMENT_METHODS
    note: Optional[str] = None


@dataclass(frozen=True)
class Loan:
    """Loan aggregate as consumed by reconciliation and rollups"""

    loan_id: str
    borrower_name: str
    terms: LoanTerms
    status: str  # one of LOAN_STATUSES
    risk_score: int
    payments: Tuple[PaymentRecord, ...] = ()


@dataclass(frozen=True)
class Reconciliation:
    """Derived financial state of a loan"""

    total_paid: Decimal
    remaining_balance: Decimal
    progress_percent: Decimal


@dataclass(frozen=True)
class RiskRanking:
    """Loan entry in the risk leaderboard"""

    loan_id: str
    borrower_name: str
    risk_score: int


@dataclass(frozen=True)
class MonthlyPrincipal:
    """Principal originated in a calendar month"""

    month: str  # YYYY-MM
    amount: Decimal


@dataclass
class PortfolioSummary:
    """Cross-loan aggregates for the dashboard"""

    total_loans: int
    total_principal: Decimal
    overdue_count: int
    average_risk_score: float
    status_distribution: Dict[str, int] = field(default_factory=dict)
    top_risk: List[RiskRanking] = field(default_factory=list)
    principal_by_month: List[MonthlyPrincipal] = field(default_factory=list)


@dataclass
class BorrowerSummary:
    """Aggregates for all loans held by one borrower"""

    borrower_name: str
    total_loans: int
    total_borrowed: Decimal
    total_outstanding: Decimal
    total_paid: Decimal
    active_count: int
    overdue_count: int
    paid_count: int
    average_risk_score: float
    average_interest_rate: float


@dataclass(frozen=True)
class Liability:
    """External liability reported by the bank aggregator"""

    kind: str  # one of LIABILITY_KINDS
    name: Optional[str]
    balance: Optional[Decimal]
    annual_rate_percent: Optional[Decimal]
    origination_date: Optional[date]
    next_payment_due_date: Optional[date]
    is_overdue: bool


@dataclass(frozen=True)
class ImportedLoan:
    """Loan creation record derived from an external liability"""

    borrower_name: str
    principal: Decimal
    annual_rate_percent: Decimal
    start_date: date
    due_date: date
    status: str
    risk_score: int
    source_kind: str
