"""Abstract base class for fraud detection rules."""

from abc import ABC, abstractmethod
from decimal import Decimal

from src.shared.enums import AlertSeverity, AlertType

from ..config import FraudThresholds
from ..models import Alert, MemberActivity, RuleResult, TransactionCheck


def format_kes(value: Decimal) -> str:
    return f"KES {value:,.2f}"


class FraudRule(ABC):
    """Base class for all fraud rules.

    Rules are pure: every query they need has already been answered in the
    ``MemberActivity`` they receive, so one rule firing never affects another.
    """

    rule_id: str
    alert_type: AlertType
    severity: AlertSeverity

    @abstractmethod
    def evaluate(
        self,
        check: TransactionCheck,
        activity: MemberActivity,
        thresholds: FraudThresholds,
    ) -> RuleResult:
        """Evaluate this rule and return a RuleResult."""
        ...

    def _not_triggered(self) -> RuleResult:
        return RuleResult(rule_name=self.rule_id, triggered=False)

    def _triggered(self, description: str, evidence: dict | None = None) -> RuleResult:
        return RuleResult(
            rule_name=self.rule_id,
            triggered=True,
            alert=Alert(
                type=self.alert_type,
                severity=self.severity,
                description=description,
            ),
            evidence=evidence or {},
        )
