"""Pydantic models for the fraud domain."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.shared.enums import AlertSeverity, AlertType, TransactionType


class TransactionCheck(BaseModel):
    """A committed transaction handed to the scorer."""

    member_id: str
    transaction_id: str
    transaction_type: TransactionType
    amount: Decimal = Field(gt=0)


class MemberActivity(BaseModel):
    """Store-derived context the rules evaluate against."""

    recent_count: int = 0
    daily_total: Decimal = Decimal("0")
    # Post-debit balance; only looked up for withdrawals
    balance: Decimal | None = None
    computed_at: datetime | None = None


class Alert(BaseModel):
    type: AlertType
    severity: AlertSeverity
    description: str


class RuleResult(BaseModel):
    rule_name: str
    triggered: bool
    alert: Alert | None = None
    evidence: dict = Field(default_factory=dict)


class FraudCheckResult(BaseModel):
    flagged: bool = False
    alerts: list[Alert] = []
