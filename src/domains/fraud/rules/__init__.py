"""Fraud detection rules package.

Exports ALL_RULES (list of all rule instances) and individual rule classes
for direct use.
"""

from .amount import (
    LargeDepositRule,
    LargeLoanRule,
    LargeWithdrawalRule,
    NearTotalWithdrawalRule,
)
from .base import FraudRule, format_kes
from .velocity import DailyLimitRule, RapidTransactionsRule

# All rule instances in evaluation order
ALL_RULES: list[FraudRule] = [
    LargeDepositRule(),
    LargeWithdrawalRule(),
    RapidTransactionsRule(),
    NearTotalWithdrawalRule(),
    LargeLoanRule(),
    DailyLimitRule(),
]

__all__ = [
    "ALL_RULES",
    "FraudRule",
    "format_kes",
    "LargeDepositRule",
    "LargeWithdrawalRule",
    "NearTotalWithdrawalRule",
    "LargeLoanRule",
    "RapidTransactionsRule",
    "DailyLimitRule",
]
