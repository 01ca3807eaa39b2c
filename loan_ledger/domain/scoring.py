"""Risk scoring engine - snapshot risk assessment computed at loan creation"""

from datetime import date
from decimal import Decimal
from typing import Union

from loan_ledger.utils.date_utils import whole_days_between

Number = Union[int, float, Decimal]

MAX_RISK_SCORE = 100


def principal_band(principal: Number) -> int:
    """Larger principal means more exposure"""
    if principal > 100_000:
        return 30
    elif principal > 50_000:
        return 20
    elif principal > 10_000:
        return 10
    else:
        return 5


def rate_band(annual_rate_percent: Number) -> int:
    """Higher rates are usually priced for riskier borrowers"""
    if annual_rate_percent > 15:
        return 30
    elif annual_rate_percent > 10:
        return 20
    elif annual_rate_percent > 5:
        return 10
    else:
        return 5


def duration_band(duration_days: int) -> int:
    """Longer terms leave more time for things to go wrong"""
    if duration_days > 365:
        return 20
    elif duration_days > 180:
        return 15
    elif duration_days > 90:
        return 10
    else:
        return 5


def calculate_risk_score(
    principal: Number,
    annual_rate_percent: Number,
    start_date: date,
    due_date: date,
) -> int:
    """
    Calculate risk score from 0 (lowest risk) to 100 (highest risk).

    Three independent bands are summed:
    - Principal: >100k → 30, >50k → 20, >10k → 10, else 5
    - Rate:      >15%  → 30, >10% → 20, >5%  → 10, else 5
    - Duration:  >365d → 20, >180d → 15, >90d → 10, else 5

    All comparisons are strict, so a value sitting exactly on a threshold
    lands in the lower band. The bands top out at 80; the 100 cap is kept
    so stored scores keep their documented range.

    Inputs are assumed validated (see domain.validation).
    """
    duration_days = whole_days_between(start_date, due_date)

    score = (
        principal_band(principal)
        + rate_band(annual_rate_percent)
        + duration_band(duration_days)
    )

    return min(score, MAX_RISK_SCORE)


def risk_band(score: float) -> str:
    """
    Map a score to the label used for triage.

    Bands:
    - 70+:   high
    - 40-70: medium
    - <40:   low
    """
    if score >= 70:
        return "high"
    elif score >= 40:
        return "medium"
    else:
        return "low"
