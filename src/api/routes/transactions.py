"""Deposit, withdrawal and loan endpoints. Each response carries the fraud check."""

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_transaction_service
from src.domains.transactions.models import (
    DepositRequest,
    LoanApplication,
    LoanRepaymentRequest,
    WithdrawalRequest,
)
from src.domains.transactions.service import TransactionService
from src.shared.enums import TransactionStatus, TransactionType

router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


@router.post("/deposit", status_code=201)
async def deposit(
    body: DepositRequest,
    service: TransactionService = Depends(get_transaction_service),  # noqa: B008
) -> dict:
    outcome = await service.deposit(body.member_id, body.amount, body.description)
    return outcome.model_dump(mode="json")


@router.post("/withdraw", status_code=201)
async def withdraw(
    body: WithdrawalRequest,
    service: TransactionService = Depends(get_transaction_service),  # noqa: B008
) -> dict:
    outcome = await service.withdraw(body.member_id, body.amount, body.description)
    return outcome.model_dump(mode="json")


@router.post("/loan-apply", status_code=201)
async def apply_loan(
    body: LoanApplication,
    service: TransactionService = Depends(get_transaction_service),  # noqa: B008
) -> dict:
    outcome = await service.apply_loan(
        body.member_id, body.amount, body.interest_rate, body.term_months, body.purpose
    )
    return outcome.model_dump(mode="json")


@router.post("/loan-repay", status_code=201)
async def repay_loan(
    body: LoanRepaymentRequest,
    service: TransactionService = Depends(get_transaction_service),  # noqa: B008
) -> dict:
    outcome = await service.repay_loan(body.loan_id, body.amount)
    return outcome.model_dump(mode="json")


@router.get("/history")
async def history(
    service: TransactionService = Depends(get_transaction_service),  # noqa: B008
    member_id: str | None = None,
    type: TransactionType | None = None,  # noqa: A002
    status: TransactionStatus | None = None,
    page: int = Query(default=1, ge=1),
) -> dict:
    return await service.history(member_id=member_id, txn_type=type, status=status, page=page)
