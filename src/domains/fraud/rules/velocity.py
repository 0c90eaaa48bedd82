"""Velocity and cumulative-volume rules."""

from src.shared.enums import AlertSeverity, AlertType

from ..config import FraudThresholds
from ..models import MemberActivity, RuleResult, TransactionCheck
from .base import FraudRule, format_kes


class RapidTransactionsRule(FraudRule):
    """Triggers when the member's count in the trailing window reaches the limit."""

    rule_id = "rapid_transactions"
    alert_type = AlertType.RAPID_TRANSACTIONS
    severity = AlertSeverity.MEDIUM

    def evaluate(
        self,
        check: TransactionCheck,
        activity: MemberActivity,
        thresholds: FraudThresholds,
    ) -> RuleResult:
        count = activity.recent_count
        threshold = thresholds.rapid_txn_count
        if count < threshold:
            return self._not_triggered()

        window = thresholds.rapid_txn_window_minutes
        return self._triggered(
            f"{count} transactions in the last {window} minutes "
            f"(threshold: {threshold}) - possible structuring or automated activity",
            evidence={"count": count, "threshold": threshold, "window_minutes": window},
        )


class DailyLimitRule(FraudRule):
    """Triggers when today's volume including this transaction reaches the limit."""

    rule_id = "daily_limit"
    alert_type = AlertType.DAILY_LIMIT_EXCEEDED
    severity = AlertSeverity.HIGH

    def evaluate(
        self,
        check: TransactionCheck,
        activity: MemberActivity,
        thresholds: FraudThresholds,
    ) -> RuleResult:
        total = activity.daily_total + check.amount
        limit = thresholds.daily_limit
        if total < limit:
            return self._not_triggered()

        return self._triggered(
            f"Daily transaction volume of {format_kes(total)} "
            f"exceeds limit of {format_kes(limit)}",
            evidence={"total": str(total), "limit": str(limit)},
        )
