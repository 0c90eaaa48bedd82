"""Reference codes and loan arithmetic."""

import random
import string
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from src.shared.enums import TransactionType

TX_REF_PREFIXES = {
    TransactionType.DEPOSIT: "DEP",
    TransactionType.WITHDRAWAL: "WTH",
    TransactionType.LOAN_DISBURSEMENT: "LND",
    TransactionType.LOAN_REPAYMENT: "LNR",
}

_REF_ALPHABET = string.ascii_uppercase + string.digits


def generate_tx_ref(
    txn_type: TransactionType,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> str:
    """``DEP-20260115-K3X9QZ`` style reference."""
    now = now or datetime.now(UTC)
    rng = rng or random.Random()
    suffix = "".join(rng.choice(_REF_ALPHABET) for _ in range(6))
    return f"{TX_REF_PREFIXES[txn_type]}-{now:%Y%m%d}-{suffix}"


def generate_loan_ref(now: datetime | None = None, rng: random.Random | None = None) -> str:
    """``LN-2026-4821`` style reference."""
    now = now or datetime.now(UTC)
    rng = rng or random.Random()
    return f"LN-{now.year}-{rng.randint(1000, 9999)}"


def monthly_payment(principal: Decimal, annual_rate: Decimal, term_months: int) -> Decimal:
    """Amortized monthly instalment, rounded to a whole shilling."""
    if term_months <= 0:
        raise ValueError("Loan term must be at least one month")

    if annual_rate == 0:
        payment = principal / term_months
    else:
        r = annual_rate / Decimal(100) / Decimal(12)
        growth = (1 + r) ** term_months
        payment = principal * r * growth / (growth - 1)

    return payment.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
