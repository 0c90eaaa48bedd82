"""Compute a member's recent activity for the fraud rules."""

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import structlog

from src.shared.enums import TransactionType

from .config import FraudThresholds, default_thresholds
from .models import MemberActivity
from .store import FraudStore

logger = structlog.get_logger()


def start_of_local_day(now: datetime, tz: ZoneInfo) -> datetime:
    """Midnight of ``now``'s calendar day in ``tz``, as an aware datetime."""
    local = now.astimezone(tz)
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


class ActivityComputer:
    """Runs the read queries the rules need, before any rule is evaluated.

    The queries are independent of one another. They run one after another
    because they share the caller's session.
    """

    def __init__(
        self,
        timezone: str = "Africa/Nairobi",
        thresholds: FraudThresholds | None = None,
    ) -> None:
        self._tz = ZoneInfo(timezone)
        self._thresholds = thresholds or default_thresholds

    async def compute(
        self,
        store: FraudStore,
        member_id: str,
        transaction_id: str,
        transaction_type: TransactionType,
        now: datetime | None = None,
    ) -> MemberActivity:
        now = now or datetime.now(UTC)
        window_start = now - timedelta(minutes=self._thresholds.rapid_txn_window_minutes)
        # Bound in UTC, matching how created_at is written
        day_start = start_of_local_day(now, self._tz).astimezone(UTC)

        # The transaction being scored is already persisted: it counts towards
        # the rapid window, but its amount is added by the daily rule itself
        recent_count = await store.count_transactions(member_id, window_start)
        daily_total = await store.sum_transaction_amounts(
            member_id, day_start, exclude_transaction_id=transaction_id
        )

        balance = None
        if transaction_type == TransactionType.WITHDRAWAL:
            balance = await store.get_member_balance(member_id)

        logger.debug(
            "member_activity_computed",
            member_id=member_id,
            recent_count=recent_count,
            daily_total=str(daily_total),
        )

        return MemberActivity(
            recent_count=recent_count,
            daily_total=daily_total,
            balance=balance,
            computed_at=now,
        )
