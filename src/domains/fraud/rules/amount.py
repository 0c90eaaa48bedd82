"""Single-transaction amount rules."""

from decimal import ROUND_HALF_UP, Decimal

from src.shared.enums import AlertSeverity, AlertType, TransactionType

from ..config import FraudThresholds
from ..models import MemberActivity, RuleResult, TransactionCheck
from .base import FraudRule, format_kes


class LargeDepositRule(FraudRule):
    """Triggers for deposits at or above the large-deposit threshold."""

    rule_id = "large_deposit"
    alert_type = AlertType.LARGE_DEPOSIT
    severity = AlertSeverity.HIGH

    def evaluate(
        self,
        check: TransactionCheck,
        activity: MemberActivity,
        thresholds: FraudThresholds,
    ) -> RuleResult:
        threshold = thresholds.large_deposit_min
        if check.transaction_type != TransactionType.DEPOSIT or check.amount < threshold:
            return self._not_triggered()

        return self._triggered(
            f"Unusually large deposit of {format_kes(check.amount)} "
            f"exceeds threshold of {format_kes(threshold)}",
            evidence={"amount": str(check.amount), "threshold": str(threshold)},
        )


class LargeWithdrawalRule(FraudRule):
    """Triggers for withdrawals at or above the large-withdrawal threshold."""

    rule_id = "large_withdrawal"
    alert_type = AlertType.LARGE_WITHDRAWAL
    severity = AlertSeverity.HIGH

    def evaluate(
        self,
        check: TransactionCheck,
        activity: MemberActivity,
        thresholds: FraudThresholds,
    ) -> RuleResult:
        threshold = thresholds.large_withdrawal_min
        if check.transaction_type != TransactionType.WITHDRAWAL or check.amount < threshold:
            return self._not_triggered()

        return self._triggered(
            f"Large withdrawal of {format_kes(check.amount)} "
            f"exceeds threshold of {format_kes(threshold)}",
            evidence={"amount": str(check.amount), "threshold": str(threshold)},
        )


class NearTotalWithdrawalRule(FraudRule):
    """Triggers when a withdrawal drains most of what the member held.

    The stored balance has already been debited when scoring runs, so the
    balance before the withdrawal is ``balance + amount``.
    """

    rule_id = "near_total_withdrawal"
    alert_type = AlertType.NEAR_TOTAL_WITHDRAWAL
    severity = AlertSeverity.CRITICAL

    def evaluate(
        self,
        check: TransactionCheck,
        activity: MemberActivity,
        thresholds: FraudThresholds,
    ) -> RuleResult:
        if check.transaction_type != TransactionType.WITHDRAWAL or activity.balance is None:
            return self._not_triggered()

        prior_balance = activity.balance + check.amount
        if prior_balance <= 0:
            return self._not_triggered()

        ratio = check.amount / prior_balance
        if ratio < thresholds.near_total_withdrawal_ratio:
            return self._not_triggered()

        percent = (ratio * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return self._triggered(
            f"Withdrawal of {percent}% of total balance "
            f"({format_kes(check.amount)} of {format_kes(prior_balance)}) "
            f"- near-total account drainage",
            evidence={
                "amount": str(check.amount),
                "prior_balance": str(prior_balance),
                "ratio": str(ratio),
            },
        )


class LargeLoanRule(FraudRule):
    """Triggers for loan disbursements at or above the large-loan threshold."""

    rule_id = "large_loan"
    alert_type = AlertType.LARGE_LOAN
    severity = AlertSeverity.HIGH

    def evaluate(
        self,
        check: TransactionCheck,
        activity: MemberActivity,
        thresholds: FraudThresholds,
    ) -> RuleResult:
        threshold = thresholds.large_loan_min
        if (
            check.transaction_type != TransactionType.LOAN_DISBURSEMENT
            or check.amount < threshold
        ):
            return self._not_triggered()

        return self._triggered(
            f"High-value loan disbursement of {format_kes(check.amount)} "
            f"meets threshold of {format_kes(threshold)}",
            evidence={"amount": str(check.amount), "threshold": str(threshold)},
        )
