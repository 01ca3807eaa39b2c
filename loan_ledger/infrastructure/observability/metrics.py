"""Prometheus metrics for loan creation, payments, imports and change-event delivery"""

from prometheus_client import Counter, Histogram

from loan_ledger.domain.scoring import risk_band

# Loan metrics
loans_created_counter = Counter(
    "loan_ledger_loans_created_total",
    "Loans created",
    ["source", "risk_band"],  # manual | credit | student | mortgage ; low | medium | high
)

risk_score_histogram = Histogram(
    "loan_ledger_risk_score",
    "Risk scores assigned at loan creation",
    buckets=[15, 25, 35, 45, 55, 65, 75, 85, 100],
)

status_transition_counter = Counter(
    "loan_ledger_status_transitions_total",
    "Explicit loan status changes",
    ["from_status", "to_status"],
)

# Payment metrics
payments_recorded_counter = Counter(
    "loan_ledger_payments_recorded_total",
    "Payments appended to loan histories",
    ["method"],
)

validation_rejections_counter = Counter(
    "loan_ledger_validation_rejections_total",
    "Inputs rejected before reaching the ledger",
    ["operation", "field"],
)

# Aggregator metrics
aggregator_failures_counter = Counter(
    "aggregator_failures_total",
    "Failed bank aggregator calls",
    ["operation"],
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "webhook_latency_seconds",
    "Change-event webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "webhook_failures_total",
    "Failed webhook deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_loan_created(source: str, risk_score: int) -> None:
    """Record creation by source and risk band for portfolio mix monitoring"""
    loans_created_counter.labels(source=source, risk_band=risk_band(risk_score)).inc()
    risk_score_histogram.observe(risk_score)


def record_validation_rejection(operation: str, fields) -> None:
    for field in fields:
        validation_rejections_counter.labels(operation=operation, field=field).inc()
