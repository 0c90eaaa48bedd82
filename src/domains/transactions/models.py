"""Request and response models for transaction processing."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.domains.fraud.models import FraudCheckResult


class DepositRequest(BaseModel):
    member_id: str
    amount: Decimal
    description: str | None = None


class WithdrawalRequest(BaseModel):
    member_id: str
    amount: Decimal
    description: str | None = None


class LoanApplication(BaseModel):
    member_id: str
    amount: Decimal
    interest_rate: Decimal = Field(ge=0)
    term_months: int = Field(gt=0)
    purpose: str | None = None


class LoanRepaymentRequest(BaseModel):
    loan_id: str
    amount: Decimal


class TransactionOutcome(BaseModel):
    """What a processed transaction hands back to the API layer."""

    message: str
    transaction: dict
    loan: dict | None = None
    # None when the fraud check itself failed
    fraud_check: FraudCheckResult | None = None
