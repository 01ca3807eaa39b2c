"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Literal, Optional


class LoanCreateRequest(BaseModel):
    """Request body for POST /v1/loans

    Range checks happen in the domain validator so every failing field is
    reported together.
    """

    borrower_name: str = Field(..., description="Borrower display name")
    principal: Optional[Decimal] = Field(None, description="Amount lent, currency units")
    annual_rate_percent: Optional[Decimal] = Field(None, description="Nominal annual rate, 0-100")
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    status: str = "active"
    notes: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    """Request body for PATCH /v1/loans/{loan_id}/status"""

    status: str


class PaymentCreateRequest(BaseModel):
    """Request body for POST /v1/loans/{loan_id}/payments"""

    model_config = ConfigDict(populate_by_name=True)

    amount: Optional[Decimal] = None
    paid_on: Optional[date] = Field(default_factory=date.today, alias="date")
    method: str = "bank_transfer"
    note: Optional[str] = None


class PaymentSchema(BaseModel):
    """Single payment in a loan's history"""

    model_config = ConfigDict(populate_by_name=True)

    payment_id: str
    amount: Decimal
    paid_on: date = Field(..., alias="date")
    method: str
    note: Optional[str] = None


class LoanResponse(BaseModel):
    """Loan with reconciled balance; history in entry order"""

    loan_id: str
    borrower_name: str
    principal: Decimal
    annual_rate_percent: Decimal
    start_date: date
    due_date: date
    status: str
    risk_score: int
    risk_band: str
    source: str
    notes: Optional[str] = None
    total_paid: Decimal
    remaining_balance: Decimal
    progress_percent: float
    is_fully_paid: bool
    last_payment_date: Optional[date] = None
    payments: List[PaymentSchema]
    created_at: Optional[str] = None


class LoanListResponse(BaseModel):
    """Response for GET /v1/loans"""

    loans: List[LoanResponse]


class PaymentResponse(BaseModel):
    """Response for POST /v1/loans/{loan_id}/payments"""

    payment: PaymentSchema
    loan: LoanResponse


class ESGMetricsRequest(BaseModel):
    """Request body for PUT /v1/loans/{loan_id}/esg"""

    esg_score: float = Field(..., ge=0, le=100)
    environmental_score: float = Field(..., ge=0, le=100)
    social_score: float = Field(..., ge=0, le=100)
    governance_score: float = Field(..., ge=0, le=100)
    carbon_footprint: float = Field(..., ge=0, description="Tonnes CO2e")
    notes: Optional[str] = None


class ESGMetricsResponse(ESGMetricsRequest):
    """Stored ESG metrics for a loan"""

    loan_id: str
    updated_at: Optional[str] = None


class AlertCreateRequest(BaseModel):
    """Request body for POST /v1/alerts"""

    loan_id: str
    type: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    severity: Literal["low", "medium", "high"] = "low"


class AlertResponse(BaseModel):
    alert_id: str
    loan_id: str
    type: str
    message: str
    severity: str
    triggered_at: str
    read: bool
    resolved: bool


class AlertListResponse(BaseModel):
    """Response for GET /v1/alerts"""

    alerts: List[AlertResponse]
    unread_count: int


class RiskRankingSchema(BaseModel):
    loan_id: str
    borrower_name: str
    risk_score: int


class MonthlyPrincipalSchema(BaseModel):
    month: str
    amount: Decimal


class PortfolioResponse(BaseModel):
    """Response for GET /v1/portfolio"""

    total_loans: int
    total_principal: Decimal
    overdue_count: int
    average_risk_score: float
    status_distribution: Dict[str, int]
    top_risk: List[RiskRankingSchema]
    principal_by_month: List[MonthlyPrincipalSchema]


class BorrowerSummarySchema(BaseModel):
    """Rollup for one borrower"""

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
    risk_band: str


class BorrowerListResponse(BaseModel):
    """Response for GET /v1/portfolio/borrowers"""

    borrowers: List[BorrowerSummarySchema]


class LinkTokenResponse(BaseModel):
    """Response for POST /v1/imports/link-token"""

    link_token: str


class LiabilityImportRequest(BaseModel):
    """Request body for POST /v1/imports/liabilities"""

    public_token: str = Field(..., min_length=1)


class LiabilityImportResponse(BaseModel):
    """Response for POST /v1/imports/liabilities"""

    loans_imported: int
    loans: List[LoanResponse]
