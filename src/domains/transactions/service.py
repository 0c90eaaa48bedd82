"""Records member transactions and runs the fraud check on each one."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import Loan, Member, Transaction
from src.domains.fraud.models import FraudCheckResult
from src.domains.fraud.scorer import FraudScorer
from src.domains.fraud.store import FraudStore
from src.shared.enums import LoanStatus, MemberStatus, TransactionStatus, TransactionType
from src.shared.errors import (
    InsufficientBalanceError,
    InvalidAmountError,
    LoanNotFoundError,
    LoanStateError,
    MemberNotFoundError,
    MemberSuspendedError,
)
from src.shared.money import CENT, MAX_AMOUNT, has_sub_cent_digits

from .models import TransactionOutcome
from .references import generate_loan_ref, generate_tx_ref, monthly_payment

logger = structlog.get_logger()

HISTORY_PAGE_SIZE = 20
MAX_INTEREST_RATE = Decimal("100")


def transaction_to_dict(txn: Transaction) -> dict:
    return {
        "id": txn.id,
        "tx_ref": txn.tx_ref,
        "member_id": txn.member_id,
        "loan_id": txn.loan_id,
        "type": txn.type,
        "amount": txn.amount,
        "balance_before": txn.balance_before,
        "balance_after": txn.balance_after,
        "description": txn.description,
        "status": txn.status,
        "created_at": txn.created_at.isoformat() if txn.created_at else None,
    }


def loan_to_dict(loan: Loan) -> dict:
    return {
        "id": loan.id,
        "loan_ref": loan.loan_ref,
        "member_id": loan.member_id,
        "amount": loan.amount,
        "interest_rate": loan.interest_rate,
        "term_months": loan.term_months,
        "monthly_payment": loan.monthly_payment,
        "outstanding_balance": loan.outstanding_balance,
        "total_repaid": loan.total_repaid,
        "purpose": loan.purpose,
        "status": loan.status,
    }


def _require_positive(amount: Decimal) -> Decimal:
    """Validate a requested amount against what the ledger columns can store.

    Amounts are recorded in whole cents. A sub-cent amount is rejected rather
    than rounded, so the value the rules see is the value that is stored.
    """
    amount = Decimal(amount)
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError("A positive amount is required")
    if amount > MAX_AMOUNT:
        raise InvalidAmountError(f"Amount exceeds the maximum of KES {MAX_AMOUNT:,.2f}")
    if has_sub_cent_digits(amount):
        raise InvalidAmountError("Amounts are limited to two decimal places")
    return amount.quantize(CENT)


def _require_capacity(balance: Decimal, amount: Decimal) -> None:
    if balance + amount > MAX_AMOUNT:
        raise InvalidAmountError("Resulting balance exceeds the account limit")


class TransactionService:
    """Deposit, withdrawal and loan flows for one database session.

    Each flow commits the transaction and the balance change first, then
    calls the fraud scorer. Scoring is best-effort from the member's point of
    view: a failed check is logged and reported as ``fraud_check=None``, and
    the transaction stays COMPLETED.
    """

    def __init__(self, session: AsyncSession, scorer: FraudScorer) -> None:
        self._session = session
        self._scorer = scorer

    async def _get_member(self, member_id: str) -> Member:
        member = await self._session.get(Member, member_id)
        if member is None:
            raise MemberNotFoundError(f"Member {member_id} not found")
        return member

    def _record(
        self,
        member: Member,
        txn_type: TransactionType,
        amount: Decimal,
        balance_after: Decimal,
        description: str,
        loan_id: str | None = None,
    ) -> Transaction:
        now = datetime.now(UTC)
        txn = Transaction(
            id=str(uuid.uuid4()),
            tx_ref=generate_tx_ref(txn_type, now=now),
            member_id=member.id,
            loan_id=loan_id,
            type=txn_type.value,
            amount=amount,
            balance_before=member.balance,
            balance_after=balance_after,
            description=description,
            status=TransactionStatus.COMPLETED.value,
            created_at=now,
        )
        self._session.add(txn)
        member.balance = balance_after
        return txn

    async def _check(self, txn: Transaction) -> FraudCheckResult | None:
        try:
            return await self._scorer.evaluate(
                FraudStore(self._session),
                member_id=txn.member_id,
                transaction_id=txn.id,
                transaction_type=TransactionType(txn.type),
                amount=txn.amount,
            )
        except Exception:
            logger.exception(
                "fraud_check_failed",
                transaction_id=txn.id,
                member_id=txn.member_id,
            )
            await self._session.rollback()
            return None

    async def _finish(
        self, message: str, txn: Transaction, loan: Loan | None = None
    ) -> TransactionOutcome:
        # Snapshot before scoring: a failed check rolls back and expires the session
        transaction = transaction_to_dict(txn)
        loan_state = loan_to_dict(loan) if loan is not None else None

        fraud_check = await self._check(txn)
        if fraud_check is not None and fraud_check.flagged:
            transaction["status"] = TransactionStatus.FLAGGED.value

        return TransactionOutcome(
            message=message,
            transaction=transaction,
            loan=loan_state,
            fraud_check=fraud_check,
        )

    async def deposit(
        self, member_id: str, amount: Decimal, description: str | None = None
    ) -> TransactionOutcome:
        amount = _require_positive(amount)
        member = await self._get_member(member_id)
        if member.status == MemberStatus.SUSPENDED:
            raise MemberSuspendedError("Cannot transact on a suspended account")
        _require_capacity(member.balance, amount)

        txn = self._record(
            member,
            TransactionType.DEPOSIT,
            amount,
            member.balance + amount,
            description or "Cash deposit",
        )
        await self._session.commit()
        logger.info("deposit_recorded", transaction_id=txn.id, member_id=member_id)

        return await self._finish("Deposit recorded successfully", txn)

    async def withdraw(
        self, member_id: str, amount: Decimal, description: str | None = None
    ) -> TransactionOutcome:
        amount = _require_positive(amount)
        member = await self._get_member(member_id)
        if member.status == MemberStatus.SUSPENDED:
            raise MemberSuspendedError("Cannot transact on a suspended account")
        if member.balance < amount:
            raise InsufficientBalanceError(
                f"Insufficient balance. Available: KES {member.balance:,.2f}"
            )

        # The debit commits before scoring; the near-total rule depends on it
        txn = self._record(
            member,
            TransactionType.WITHDRAWAL,
            amount,
            member.balance - amount,
            description or "Cash withdrawal",
        )
        await self._session.commit()
        logger.info("withdrawal_recorded", transaction_id=txn.id, member_id=member_id)

        return await self._finish("Withdrawal processed successfully", txn)

    async def apply_loan(
        self,
        member_id: str,
        amount: Decimal,
        interest_rate: Decimal,
        term_months: int,
        purpose: str | None = None,
    ) -> TransactionOutcome:
        amount = _require_positive(amount)
        if term_months <= 0:
            raise ValueError("Loan term must be at least one month")
        interest_rate = Decimal(interest_rate)
        if not interest_rate.is_finite() or interest_rate < 0 or interest_rate > MAX_INTEREST_RATE:
            raise ValueError(f"Interest rate must be between 0 and {MAX_INTEREST_RATE}")
        if has_sub_cent_digits(interest_rate):
            raise ValueError("Interest rate is limited to two decimal places")

        member = await self._get_member(member_id)
        if member.status != MemberStatus.ACTIVE:
            raise MemberSuspendedError("Only active members can apply for loans")
        _require_capacity(member.balance, amount)

        open_loan = await self._session.execute(
            select(Loan.id).where(
                Loan.member_id == member_id,
                Loan.status.in_([LoanStatus.ACTIVE.value, LoanStatus.PENDING.value]),
            )
        )
        if open_loan.first() is not None:
            raise LoanStateError("Member already has an active or pending loan")

        loan = Loan(
            id=str(uuid.uuid4()),
            loan_ref=generate_loan_ref(),
            member_id=member_id,
            amount=amount,
            interest_rate=Decimal(interest_rate),
            term_months=term_months,
            monthly_payment=monthly_payment(amount, Decimal(interest_rate), term_months),
            outstanding_balance=amount,
            total_repaid=Decimal("0"),
            purpose=purpose,
            status=LoanStatus.APPROVED.value,
            created_at=datetime.now(UTC),
        )
        self._session.add(loan)

        txn = self._record(
            member,
            TransactionType.LOAN_DISBURSEMENT,
            amount,
            member.balance + amount,
            f"Loan disbursement - {loan.loan_ref}",
            loan_id=loan.id,
        )
        loan.status = LoanStatus.ACTIVE.value
        await self._session.commit()
        logger.info(
            "loan_disbursed", transaction_id=txn.id, loan_id=loan.id, member_id=member_id
        )

        return await self._finish("Loan approved and disbursed successfully", txn, loan)

    async def repay_loan(self, loan_id: str, amount: Decimal) -> TransactionOutcome:
        amount = _require_positive(amount)
        loan = await self._session.get(Loan, loan_id)
        if loan is None:
            raise LoanNotFoundError(f"Loan {loan_id} not found")
        if loan.status != LoanStatus.ACTIVE:
            raise LoanStateError("Can only repay active loans")

        member = await self._get_member(loan.member_id)
        if member.balance < amount:
            raise InsufficientBalanceError(
                f"Insufficient balance. Available: KES {member.balance:,.2f}"
            )

        repay_amount = min(amount, loan.outstanding_balance)
        txn = self._record(
            member,
            TransactionType.LOAN_REPAYMENT,
            repay_amount,
            member.balance - repay_amount,
            f"Loan repayment - {loan.loan_ref}",
            loan_id=loan.id,
        )
        loan.outstanding_balance = loan.outstanding_balance - repay_amount
        loan.total_repaid = loan.total_repaid + repay_amount
        fully_repaid = loan.outstanding_balance <= 0
        if fully_repaid:
            loan.status = LoanStatus.COMPLETED.value
        await self._session.commit()
        logger.info(
            "loan_repayment_recorded",
            transaction_id=txn.id,
            loan_id=loan.id,
            fully_repaid=fully_repaid,
        )

        message = "Loan fully repaid" if fully_repaid else "Repayment recorded successfully"
        return await self._finish(message, txn, loan)

    async def history(
        self,
        member_id: str | None = None,
        txn_type: TransactionType | None = None,
        status: TransactionStatus | None = None,
        page: int = 1,
    ) -> dict:
        page = max(page, 1)
        filters = []
        if member_id:
            filters.append(Transaction.member_id == member_id)
        if txn_type is not None:
            filters.append(Transaction.type == txn_type.value)
        if status is not None:
            filters.append(Transaction.status == status.value)

        count_stmt = select(func.count()).select_from(Transaction).where(*filters)
        total = (await self._session.execute(count_stmt)).scalar_one()

        stmt = (
            select(Transaction)
            .where(*filters)
            .order_by(Transaction.created_at.desc())
            .offset((page - 1) * HISTORY_PAGE_SIZE)
            .limit(HISTORY_PAGE_SIZE)
        )
        rows = (await self._session.execute(stmt)).scalars().all()

        return {
            "items": [transaction_to_dict(t) for t in rows],
            "total": total,
            "page": page,
            "limit": HISTORY_PAGE_SIZE,
            "total_pages": -(-total // HISTORY_PAGE_SIZE),
        }
