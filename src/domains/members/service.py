"""Member registration, status management and balance lookups."""

import random
import re
import uuid
from datetime import UTC, datetime
from decimal import Decimal

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import Loan, Member, Transaction
from src.shared.enums import LoanStatus, MemberStatus, TransactionType
from src.shared.errors import DuplicateMemberError, MemberNotFoundError

logger = structlog.get_logger()

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?\d{10,15}$")
MEMBER_NUMBER_ATTEMPTS = 10
MEMBER_PAGE_SIZE = 20


def member_number_prefix(full_name: str) -> str:
    """Two letters of the last name then two of the first, padded with X."""
    parts = full_name.strip().split()
    if len(parts) < 2:
        raise ValueError("Full name must include first and last name")
    first, last = parts[0].upper(), parts[-1].upper()
    return last[:2].ljust(2, "X") + first[:2].ljust(2, "X")


async def _member_number_taken(session: AsyncSession, member_number: str) -> bool:
    stmt = select(Member.id).where(Member.member_number == member_number)
    return (await session.execute(stmt)).scalar_one_or_none() is not None


async def generate_member_number(
    session: AsyncSession, full_name: str, rng: random.Random | None = None
) -> str:
    """Pick an unused member number such as ``MWJO12``.

    Tries two random digits a few times, then falls back to three.
    """
    rng = rng or random.Random()
    prefix = member_number_prefix(full_name)

    for _ in range(MEMBER_NUMBER_ATTEMPTS):
        candidate = f"{prefix}{rng.randrange(100):02d}"
        if not await _member_number_taken(session, candidate):
            return candidate

    fallback = f"{prefix}{rng.randrange(1000):03d}"
    if await _member_number_taken(session, fallback):
        raise DuplicateMemberError("Unable to generate a unique member number, please retry")
    return fallback


def validate_registration(full_name: str, email: str, phone_number: str) -> None:
    if not full_name or not email or not phone_number:
        raise ValueError("Full name, email and phone number are required")
    if len(full_name.strip().split()) < 2:
        raise ValueError("Full name must include first and last name")
    if not EMAIL_RE.match(email.strip()):
        raise ValueError("Invalid email address")
    if not PHONE_RE.match(re.sub(r"[\s-]", "", phone_number)):
        raise ValueError("Invalid phone number")


def member_to_dict(member: Member) -> dict:
    return {
        "id": member.id,
        "member_number": member.member_number,
        "full_name": member.full_name,
        "email": member.email,
        "phone_number": member.phone_number,
        "status": member.status,
        "balance": member.balance,
        "created_at": member.created_at.isoformat() if member.created_at else None,
    }


async def create_member(
    session: AsyncSession, full_name: str, email: str, phone_number: str
) -> Member:
    validate_registration(full_name, email, phone_number)
    email = email.strip().lower()

    existing = await session.execute(select(Member.id).where(Member.email == email))
    if existing.scalar_one_or_none() is not None:
        raise DuplicateMemberError("A member with this email already exists")

    member = Member(
        id=str(uuid.uuid4()),
        member_number=await generate_member_number(session, full_name),
        full_name=full_name.strip(),
        email=email,
        phone_number=phone_number.strip(),
        status=MemberStatus.ACTIVE.value,
        balance=Decimal("0"),
        created_at=datetime.now(UTC),
    )
    session.add(member)
    await session.commit()

    logger.info("member_created", member_id=member.id, member_number=member.member_number)
    return member


async def get_member(session: AsyncSession, member_id: str) -> Member:
    member = await session.get(Member, member_id)
    if member is None:
        raise MemberNotFoundError(f"Member {member_id} not found")
    return member


async def list_members(
    session: AsyncSession,
    search: str | None = None,
    status: MemberStatus | None = None,
    page: int = 1,
) -> dict:
    """Page through members, newest first.

    ``search`` matches member number, full name or email, case-insensitively.
    """
    page = max(page, 1)
    filters = []
    search = (search or "").strip()
    if search:
        pattern = f"%{search}%"
        filters.append(
            or_(
                Member.member_number.ilike(pattern),
                Member.full_name.ilike(pattern),
                Member.email.ilike(pattern),
            )
        )
    if status is not None:
        filters.append(Member.status == status.value)

    count_stmt = select(func.count()).select_from(Member).where(*filters)
    total = (await session.execute(count_stmt)).scalar_one()

    stmt = (
        select(Member)
        .where(*filters)
        .order_by(Member.created_at.desc())
        .offset((page - 1) * MEMBER_PAGE_SIZE)
        .limit(MEMBER_PAGE_SIZE)
    )
    members = (await session.execute(stmt)).scalars().all()

    return {
        "items": [member_to_dict(m) for m in members],
        "total": total,
        "page": page,
        "limit": MEMBER_PAGE_SIZE,
        "total_pages": -(-total // MEMBER_PAGE_SIZE),
    }


async def member_stats(session: AsyncSession) -> dict[str, int]:
    """Member counts per status, zero for statuses with no members."""
    stmt = select(Member.status, func.count()).group_by(Member.status)
    counts = {status: count for status, count in (await session.execute(stmt)).all()}
    return {s.value.lower(): int(counts.get(s.value, 0)) for s in MemberStatus}


async def update_member_status(
    session: AsyncSession, member_id: str, status: str | None
) -> Member:
    try:
        new_status = MemberStatus(status)
    except ValueError:
        raise ValueError("Status must be ACTIVE, INACTIVE or SUSPENDED") from None

    member = await get_member(session, member_id)
    previous = member.status
    member.status = new_status.value
    await session.commit()

    logger.info(
        "member_status_changed",
        member_id=member_id,
        previous_status=previous,
        status=new_status.value,
    )
    return member


async def get_balance(session: AsyncSession, member_id: str) -> dict:
    """Current balance plus lifetime deposit/withdrawal totals and open loans."""
    member = await get_member(session, member_id)

    async def _total(txn_type: TransactionType) -> Decimal:
        stmt = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.member_id == member_id,
            Transaction.type == txn_type.value,
        )
        return Decimal((await session.execute(stmt)).scalar_one())

    total_deposits = await _total(TransactionType.DEPOSIT)
    total_withdrawals = await _total(TransactionType.WITHDRAWAL)

    loans_stmt = select(Loan).where(
        Loan.member_id == member_id,
        Loan.status.in_([LoanStatus.ACTIVE.value, LoanStatus.PENDING.value]),
    )
    loans = (await session.execute(loans_stmt)).scalars().all()

    return {
        "member": {
            "id": member.id,
            "member_number": member.member_number,
            "full_name": member.full_name,
            "balance": member.balance,
        },
        "summary": {
            "total_deposits": total_deposits,
            "total_withdrawals": total_withdrawals,
            "active_loans": [
                {
                    "loan_ref": loan.loan_ref,
                    "outstanding_balance": loan.outstanding_balance,
                    "status": loan.status,
                }
                for loan in loans
            ],
        },
    }
