"""SQLAlchemy ORM models for loans, payments, alerts and ESG metrics"""

import uuid
from sqlalchemy import Column, Boolean, Float, DateTime, Date, Integer, ForeignKey, Numeric, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class LoanRecord(Base):
    """Loan terms, status label and creation-time risk score"""

    __tablename__ = "loans"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    borrower_name = Column(Text, nullable=False, index=True)
    principal = Column(Numeric(14, 2), nullable=False)
    interest_rate = Column(Numeric(6, 3), nullable=False)
    start_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="active")
    risk_score = Column(Integer, nullable=False)
    source = Column(Text, nullable=False, default="manual")  # manual | credit | student | mortgage
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    payments = relationship(
        "LoanPayment",
        back_populates="loan",
        cascade="all, delete-orphan",
        order_by="LoanPayment.sequence",
    )
    alerts = relationship("AlertRecord", back_populates="loan", cascade="all, delete-orphan")
    esg_metrics = relationship("ESGMetricRecord", back_populates="loan", cascade="all, delete-orphan", uselist=False)


class LoanPayment(Base):
    """Append-only payment; sequence preserves entry order"""

    __tablename__ = "loan_payment"
    __table_args__ = (UniqueConstraint("loan_id", "sequence", name="uq_loan_payment_sequence"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id = Column(UUID(as_uuid=True), ForeignKey("loans.id", ondelete="CASCADE"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    paid_on = Column(Date, nullable=False)
    method = Column(Text, nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    loan = relationship("LoanRecord", back_populates="payments")


class AlertRecord(Base):
    """Notification attached to a loan"""

    __tablename__ = "alerts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    loan_id = Column(UUID(as_uuid=True), ForeignKey("loans.id", ondelete="CASCADE"), nullable=False)
    type = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    severity = Column(Text, nullable=False, default="low")
    triggered_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    read = Column(Boolean, nullable=False, default=False)
    resolved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    loan = relationship("LoanRecord", back_populates="alerts")


class ESGMetricRecord(Base):
    """Manually entered ESG metadata, one row per loan"""

    __tablename__ = "esg_metrics"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id = Column(UUID(as_uuid=True), ForeignKey("loans.id", ondelete="CASCADE"), nullable=False, unique=True)
    esg_score = Column(Float, nullable=False)
    environmental_score = Column(Float, nullable=False)
    social_score = Column(Float, nullable=False)
    governance_score = Column(Float, nullable=False)
    carbon_footprint = Column(Float, nullable=False)  # tonnes CO2e
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    loan = relationship("LoanRecord", back_populates="esg_metrics")
