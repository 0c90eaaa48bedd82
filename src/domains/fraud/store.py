"""Persistence queries the fraud scorer depends on."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import FraudAlert as FraudAlertDB
from src.db.models import Member, Transaction
from src.shared.enums import TransactionStatus
from src.shared.errors import MemberNotFoundError

from .models import Alert


class FraudStore:
    """Thin query layer over an AsyncSession.

    Errors from the session propagate unchanged; there is no retry here.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def count_transactions(self, member_id: str, created_since: datetime) -> int:
        stmt = select(func.count()).where(
            Transaction.member_id == member_id,
            Transaction.created_at >= created_since,
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def sum_transaction_amounts(
        self,
        member_id: str,
        created_since: datetime,
        exclude_transaction_id: str | None = None,
    ) -> Decimal:
        stmt = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.member_id == member_id,
            Transaction.created_at >= created_since,
        )
        if exclude_transaction_id is not None:
            stmt = stmt.where(Transaction.id != exclude_transaction_id)
        result = await self._session.execute(stmt)
        return Decimal(result.scalar_one())

    async def get_member_balance(self, member_id: str) -> Decimal:
        stmt = select(Member.balance).where(Member.id == member_id)
        result = await self._session.execute(stmt)
        balance = result.scalar_one_or_none()
        if balance is None:
            raise MemberNotFoundError(f"Member {member_id} not found")
        return Decimal(balance)

    async def insert_fraud_alerts(
        self, alerts: list[Alert], member_id: str, transaction_id: str
    ) -> None:
        now = datetime.now(UTC)
        rows = [
            {
                "id": str(uuid.uuid4()),
                "type": alert.type.value,
                "severity": alert.severity.value,
                "description": alert.description,
                "member_id": member_id,
                "transaction_id": transaction_id,
                "resolved": False,
                "created_at": now,
            }
            for alert in alerts
        ]
        await self._session.execute(insert(FraudAlertDB), rows)

    async def set_transaction_status(
        self, transaction_id: str, status: TransactionStatus
    ) -> None:
        stmt = (
            update(Transaction)
            .where(Transaction.id == transaction_id)
            .values(status=status.value)
        )
        await self._session.execute(stmt)

    async def commit(self) -> None:
        await self._session.commit()
