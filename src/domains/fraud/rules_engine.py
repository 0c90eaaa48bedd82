"""Runs every fraud rule against one transaction."""

import structlog

from .config import FraudThresholds, default_thresholds
from .models import Alert, MemberActivity, RuleResult, TransactionCheck
from .rules import ALL_RULES, FraudRule

logger = structlog.get_logger()


class RulesEngine:
    """Evaluates a transaction against the fixed rule set.

    Every rule runs exactly once per call; no rule short-circuits another and
    there is no scoring or escalation across the results.
    """

    def __init__(
        self,
        thresholds: FraudThresholds | None = None,
        rules: list[FraudRule] | None = None,
    ) -> None:
        self._thresholds = thresholds or default_thresholds
        self._rules = list(rules if rules is not None else ALL_RULES)

    @property
    def rules(self) -> list[FraudRule]:
        return list(self._rules)

    def evaluate(
        self, check: TransactionCheck, activity: MemberActivity
    ) -> tuple[list[Alert], list[RuleResult]]:
        results = [rule.evaluate(check, activity, self._thresholds) for rule in self._rules]
        alerts = [r.alert for r in results if r.triggered and r.alert is not None]

        logger.debug(
            "rules_evaluated",
            transaction_id=check.transaction_id,
            rule_count=len(results),
            triggered=[r.rule_name for r in results if r.triggered],
        )
        return alerts, results
