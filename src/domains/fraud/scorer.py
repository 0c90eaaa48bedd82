"""Fraud check pipeline: activity -> rules -> persist alerts -> flag."""

from datetime import datetime
from decimal import Decimal

import structlog

from src.shared.enums import TransactionStatus, TransactionType
from src.shared.money import to_money

from .activity import ActivityComputer
from .config import FraudThresholds, default_thresholds
from .models import FraudCheckResult, TransactionCheck
from .rules_engine import RulesEngine
from .store import FraudStore

logger = structlog.get_logger()


class FraudScorer:
    """Checks one committed transaction and records any alerts it raises.

    Called once per transaction, after the transaction row (and any balance
    change) has been committed. Store errors propagate to the caller.
    """

    def __init__(
        self,
        thresholds: FraudThresholds | None = None,
        timezone: str = "Africa/Nairobi",
    ) -> None:
        self._thresholds = thresholds or default_thresholds
        self._activity = ActivityComputer(timezone=timezone, thresholds=self._thresholds)
        self._rules_engine = RulesEngine(thresholds=self._thresholds)

    @property
    def rules_engine(self) -> RulesEngine:
        return self._rules_engine

    @property
    def thresholds(self) -> FraudThresholds:
        return self._thresholds

    async def evaluate(
        self,
        store: FraudStore,
        member_id: str,
        transaction_id: str,
        transaction_type: TransactionType | str,
        amount: Decimal | int | float | str,
        now: datetime | None = None,
    ) -> FraudCheckResult:
        check = TransactionCheck(
            member_id=member_id,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=to_money(amount),
        )

        # 1. All reads complete before any alert decision
        activity = await self._activity.compute(
            store, member_id, transaction_id, check.transaction_type, now=now
        )

        # 2. Evaluate every rule
        alerts, _ = self._rules_engine.evaluate(check, activity)

        # 3. Persist alerts as one batch and flag the transaction
        if alerts:
            await store.insert_fraud_alerts(alerts, member_id, transaction_id)
            await store.set_transaction_status(transaction_id, TransactionStatus.FLAGGED)
            await store.commit()

            logger.warning(
                "fraud_alerts_created",
                member_id=member_id,
                transaction_id=transaction_id,
                alert_types=[a.type.value for a in alerts],
            )

        logger.info(
            "fraud_check_completed",
            member_id=member_id,
            transaction_id=transaction_id,
            transaction_type=check.transaction_type.value,
            flagged=bool(alerts),
            alert_count=len(alerts),
        )

        return FraudCheckResult(flagged=bool(alerts), alerts=alerts)
