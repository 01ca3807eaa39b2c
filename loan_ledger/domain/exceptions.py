"""Domain-specific exceptions"""

from typing import List

from loan_ledger.domain.models import ValidationIssue


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class LoanValidationError(DomainException):
    """Loan or payment input was rejected before reaching the ledger"""

    def __init__(self, issues: List[ValidationIssue]):
        self.issues = list(issues)
        super().__init__("; ".join(f"{issue.field}: {issue.message}" for issue in self.issues))


class LoanNotFoundError(DomainException):
    """Loan does not exist or belongs to another user"""

    pass


class AlertNotFoundError(DomainException):
    """Alert does not exist or belongs to another user"""

    pass


class AggregatorError(DomainException):
    """Bank aggregation API returned an error or is unavailable"""

    pass


class AggregatorNotConfiguredError(AggregatorError):
    """Bank aggregation credentials are missing"""

    pass
