"""FastAPI dependencies wiring request-scoped services."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.database import get_session
from src.domains.fraud.scorer import FraudScorer
from src.domains.transactions.service import TransactionService


def get_fraud_scorer(request: Request) -> FraudScorer:
    return request.app.state.scorer


def get_transaction_service(
    session: AsyncSession = Depends(get_session),  # noqa: B008
    scorer: FraudScorer = Depends(get_fraud_scorer),  # noqa: B008
) -> TransactionService:
    return TransactionService(session, scorer)
