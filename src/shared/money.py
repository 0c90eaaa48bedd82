"""Money precision shared by the ledger and the fraud rules."""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")

# Largest value a Numeric(14, 2) column holds
MAX_AMOUNT = Decimal("999999999999.99")


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Round to whole cents, half up."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def has_sub_cent_digits(value: Decimal) -> bool:
    return value != value.quantize(CENT)
