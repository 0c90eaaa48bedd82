"""Unit tests for the member activity queries."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from src.domains.fraud.activity import ActivityComputer, start_of_local_day
from src.shared.enums import TransactionType
from src.shared.errors import MemberNotFoundError
from tests.conftest import mock_store

NOW = datetime(2026, 1, 15, 22, 30, 0, tzinfo=UTC)


class TestStartOfLocalDay:
    def test_local_day_already_rolled_over(self):
        # 22:30 UTC is 01:30 on the 16th in Nairobi (UTC+3)
        start = start_of_local_day(NOW, ZoneInfo("Africa/Nairobi"))
        assert start == datetime(2026, 1, 15, 21, 0, 0, tzinfo=UTC)

    def test_utc_day(self):
        start = start_of_local_day(NOW, ZoneInfo("UTC"))
        assert start == datetime(2026, 1, 15, 0, 0, 0, tzinfo=UTC)


class TestActivityComputer:
    @pytest.mark.asyncio
    async def test_queries_trailing_hour_and_local_day(self):
        store = mock_store(recent_count=3, daily_total=Decimal("120000"))
        computer = ActivityComputer(timezone="Africa/Nairobi")

        activity = await computer.compute(
            store, "member-1", "txn-1", TransactionType.DEPOSIT, now=NOW
        )

        store.count_transactions.assert_awaited_once_with("member-1", NOW - timedelta(hours=1))
        store.sum_transaction_amounts.assert_awaited_once_with(
            "member-1",
            datetime(2026, 1, 15, 21, 0, 0, tzinfo=UTC),
            exclude_transaction_id="txn-1",
        )
        day_start = store.sum_transaction_amounts.await_args.args[1]
        assert day_start.utcoffset() == timedelta(0)
        assert activity.recent_count == 3
        assert activity.daily_total == Decimal("120000")
        assert activity.computed_at == NOW

    @pytest.mark.asyncio
    async def test_balance_only_read_for_withdrawals(self):
        store = mock_store(balance=Decimal("1000"))
        computer = ActivityComputer()

        deposit = await computer.compute(
            store, "member-1", "txn-1", TransactionType.DEPOSIT, now=NOW
        )
        store.get_member_balance.assert_not_awaited()
        assert deposit.balance is None

        withdrawal = await computer.compute(
            store, "member-1", "txn-2", TransactionType.WITHDRAWAL, now=NOW
        )
        store.get_member_balance.assert_awaited_once_with("member-1")
        assert withdrawal.balance == Decimal("1000")

    @pytest.mark.asyncio
    async def test_missing_member_propagates(self):
        store = mock_store()
        store.get_member_balance.side_effect = MemberNotFoundError("Member ghost not found")

        with pytest.raises(MemberNotFoundError):
            await ActivityComputer().compute(
                store, "ghost", "txn-1", TransactionType.WITHDRAWAL, now=NOW
            )
