"""Pytest fixtures for testing"""

import os

# Point the app at SQLite before any loan_ledger module builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from loan_ledger.api.main import create_app
from loan_ledger.infrastructure.database.models import Base
from loan_ledger.infrastructure.database.session import get_db
from loan_ledger.domain.models import Loan, LoanTerms, PaymentRecord


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

USER_ID = "lender_1"


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and a signed-in lender"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app, headers={"X-User-ID": USER_ID})


@pytest.fixture
def loan_payload() -> dict:
    """Create-loan body: 20000 at 7% over 182 days (scores 35)"""
    return {
        "borrower_name": "Jane Doe",
        "principal": "20000",
        "annual_rate_percent": "7",
        "start_date": "2024-01-01",
        "due_date": "2024-07-01",
    }


def make_payment(amount: str, on: date = date(2024, 2, 1), payment_id: str = "p") -> PaymentRecord:
    return PaymentRecord(payment_id=payment_id, amount=Decimal(amount), date=on, method="bank_transfer")


def make_loan(
    borrower_name: str = "Jane Doe",
    principal: str = "10000",
    rate: str = "5",
    status: str = "active",
    risk_score: int = 15,
    payments=(),
    start: date = date(2024, 1, 1),
    loan_id: str = "loan",
) -> Loan:
    return Loan(
        loan_id=loan_id,
        borrower_name=borrower_name,
        terms=LoanTerms(
            principal=Decimal(principal),
            annual_rate_percent=Decimal(rate),
            start_date=start,
            due_date=date(2025, 1, 1),
        ),
        status=status,
        risk_score=risk_score,
        payments=tuple(payments),
    )
