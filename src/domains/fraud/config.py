"""Fixed fraud-check thresholds.

These are constants of the current rule set. The risk-policy records kept
elsewhere in the system are not consulted by the scorer.
"""

from dataclasses import dataclass
from decimal import Decimal

LARGE_DEPOSIT_MIN = Decimal("500000")
LARGE_WITHDRAWAL_MIN = Decimal("200000")
LARGE_LOAN_MIN = Decimal("1000000")
DAILY_LIMIT = Decimal("1000000")
NEAR_TOTAL_WITHDRAWAL_RATIO = Decimal("0.9")
RAPID_TXN_COUNT = 5
RAPID_TXN_WINDOW_MINUTES = 60


@dataclass(frozen=True)
class FraudThresholds:
    large_deposit_min: Decimal = LARGE_DEPOSIT_MIN
    large_withdrawal_min: Decimal = LARGE_WITHDRAWAL_MIN
    large_loan_min: Decimal = LARGE_LOAN_MIN
    daily_limit: Decimal = DAILY_LIMIT
    near_total_withdrawal_ratio: Decimal = NEAR_TOTAL_WITHDRAWAL_RATIO
    rapid_txn_count: int = RAPID_TXN_COUNT
    rapid_txn_window_minutes: int = RAPID_TXN_WINDOW_MINUTES


# Module-level default instance
default_thresholds = FraudThresholds()
