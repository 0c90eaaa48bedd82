"""Enumerations shared by the ORM models and the domain layer."""

from enum import StrEnum


class TransactionType(StrEnum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    LOAN_DISBURSEMENT = "LOAN_DISBURSEMENT"
    LOAN_REPAYMENT = "LOAN_REPAYMENT"


class TransactionStatus(StrEnum):
    COMPLETED = "COMPLETED"
    PENDING = "PENDING"
    FAILED = "FAILED"
    FLAGGED = "FLAGGED"


class MemberStatus(StrEnum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    INACTIVE = "INACTIVE"


class LoanStatus(StrEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


class AlertSeverity(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        """Ordinal used for sorting reports; never combined across alerts."""
        return list(AlertSeverity).index(self)


class AlertType(StrEnum):
    LARGE_DEPOSIT = "LARGE_DEPOSIT"
    LARGE_WITHDRAWAL = "LARGE_WITHDRAWAL"
    RAPID_TRANSACTIONS = "RAPID_TRANSACTIONS"
    NEAR_TOTAL_WITHDRAWAL = "NEAR_TOTAL_WITHDRAWAL"
    LARGE_LOAN = "LARGE_LOAN"
    DAILY_LIMIT_EXCEEDED = "DAILY_LIMIT_EXCEEDED"
