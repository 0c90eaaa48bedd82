"""API contract tests for the member, transaction and fraud endpoints."""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.dependencies import get_fraud_scorer, get_transaction_service
from src.db.database import get_session
from src.db.models import FraudAlert
from src.domains.fraud.config import FraudThresholds
from src.domains.fraud.models import Alert, FraudCheckResult
from src.domains.fraud.scorer import FraudScorer
from src.domains.transactions.models import TransactionOutcome
from src.domains.transactions.service import TransactionService
from src.main import app
from src.shared.enums import AlertSeverity, AlertType
from src.shared.errors import (
    DuplicateMemberError,
    InsufficientBalanceError,
    MemberNotFoundError,
    MemberSuspendedError,
)
from tests.conftest import make_member, override_get_session

pytestmark = pytest.mark.integration

BASE_URL = "http://test"

_TRANSACTION = {
    "id": "txn-1",
    "tx_ref": "DEP-20260115-K3X9QZ",
    "member_id": "member-1",
    "loan_id": None,
    "type": "DEPOSIT",
    "amount": "600000",
    "balance_before": "50000",
    "balance_after": "650000",
    "description": "Cash deposit",
    "status": "FLAGGED",
    "created_at": "2026-01-15T10:30:00+00:00",
}

_FLAGGED = FraudCheckResult(
    flagged=True,
    alerts=[
        Alert(
            type=AlertType.LARGE_DEPOSIT,
            severity=AlertSeverity.HIGH,
            description="Unusually large deposit of KES 600,000.00 (threshold: KES 500,000.00)",
        )
    ],
)


def _mock_session():
    session = AsyncMock()
    session.add = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()

    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = None
    mock_result.scalar_one.return_value = 0
    mock_result.scalars.return_value = MagicMock(all=MagicMock(return_value=[]))
    session.execute = AsyncMock(return_value=mock_result)
    session.get = AsyncMock(return_value=None)
    return session


def _setup_session():
    mock = _mock_session()
    app.dependency_overrides[get_session] = override_get_session(mock)
    return mock


def _setup_service():
    service = AsyncMock(spec=TransactionService)
    app.dependency_overrides[get_transaction_service] = lambda: service
    return service


def _teardown():
    app.dependency_overrides.clear()


def _client(raise_app_exceptions: bool = True):
    transport = ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
    return AsyncClient(transport=transport, base_url=BASE_URL)


class TestTransactions:
    @pytest.mark.asyncio
    async def test_deposit_returns_fraud_check(self):
        service = _setup_service()
        service.deposit.return_value = TransactionOutcome(
            message="Deposit recorded successfully",
            transaction=_TRANSACTION,
            fraud_check=_FLAGGED,
        )
        try:
            async with _client() as c:
                resp = await c.post(
                    "/api/v1/transactions/deposit",
                    json={"member_id": "member-1", "amount": "600000"},
                )
            assert resp.status_code == 201
            data = resp.json()
            assert data["transaction"]["status"] == "FLAGGED"
            assert data["fraud_check"]["flagged"] is True
            assert data["fraud_check"]["alerts"][0]["type"] == "LARGE_DEPOSIT"
            assert data["fraud_check"]["alerts"][0]["severity"] == "HIGH"
            service.deposit.assert_awaited_once_with("member-1", Decimal("600000"), None)
        finally:
            _teardown()

    @pytest.mark.asyncio
    async def test_failed_check_is_null(self):
        service = _setup_service()
        service.withdraw.return_value = TransactionOutcome(
            message="Withdrawal processed successfully",
            transaction={**_TRANSACTION, "type": "WITHDRAWAL", "status": "COMPLETED"},
            fraud_check=None,
        )
        try:
            async with _client() as c:
                resp = await c.post(
                    "/api/v1/transactions/withdraw",
                    json={"member_id": "member-1", "amount": "100"},
                )
            assert resp.status_code == 201
            assert resp.json()["fraud_check"] is None
        finally:
            _teardown()

    @pytest.mark.asyncio
    async def test_loan_apply_validates_term(self):
        _setup_service()
        try:
            async with _client() as c:
                resp = await c.post(
                    "/api/v1/transactions/loan-apply",
                    json={
                        "member_id": "member-1",
                        "amount": "50000",
                        "interest_rate": "12",
                        "term_months": 0,
                    },
                )
            assert resp.status_code == 422
        finally:
            _teardown()

    @pytest.mark.asyncio
    async def test_history_filters(self):
        service = _setup_service()
        service.history.return_value = {
            "items": [],
            "total": 0,
            "page": 2,
            "limit": 20,
            "total_pages": 0,
        }
        try:
            async with _client() as c:
                resp = await c.get(
                    "/api/v1/transactions/history",
                    params={"member_id": "member-1", "type": "WITHDRAWAL", "page": 2},
                )
            assert resp.status_code == 200
            kwargs = service.history.await_args.kwargs
            assert kwargs["member_id"] == "member-1"
            assert kwargs["txn_type"] == "WITHDRAWAL"
            assert kwargs["page"] == 2
        finally:
            _teardown()


class TestErrorMapping:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc,status,error",
        [
            (InsufficientBalanceError("Insufficient balance"), 400, "bad_request"),
            (MemberSuspendedError("Cannot transact"), 403, "forbidden"),
            (MemberNotFoundError("Member ghost not found"), 404, "not_found"),
        ],
    )
    async def test_domain_errors(self, exc, status, error):
        service = _setup_service()
        service.withdraw.side_effect = exc
        try:
            async with _client() as c:
                resp = await c.post(
                    "/api/v1/transactions/withdraw",
                    json={"member_id": "member-1", "amount": "100"},
                    headers={"X-Request-ID": "req-42"},
                )
            assert resp.status_code == status
            body = resp.json()
            assert body["error"] == error
            assert body["message"] == str(exc)
            assert body["request_id"] == "req-42"
        finally:
            _teardown()

    @pytest.mark.asyncio
    async def test_duplicate_member_conflict(self):
        _setup_session()
        try:
            with patch(
                "src.api.routes.members.create_member",
                AsyncMock(side_effect=DuplicateMemberError("Email already registered")),
            ):
                async with _client() as c:
                    resp = await c.post(
                        "/api/v1/members",
                        json={
                            "full_name": "Joshua Mwalimu",
                            "email": "joshua@example.com",
                            "phone_number": "0712345678",
                        },
                    )
            assert resp.status_code == 409
            assert resp.json()["error"] == "conflict"
        finally:
            _teardown()

    @pytest.mark.asyncio
    async def test_unexpected_error(self):
        service = _setup_service()
        service.deposit.side_effect = RuntimeError("boom")
        try:
            async with _client(raise_app_exceptions=False) as c:
                resp = await c.post(
                    "/api/v1/transactions/deposit",
                    json={"member_id": "member-1", "amount": "100"},
                )
            assert resp.status_code == 500
            assert resp.json()["error"] == "internal_server_error"
        finally:
            _teardown()


class TestMembers:
    @pytest.mark.asyncio
    async def test_register(self):
        _setup_session()
        member = make_member(created_at=datetime(2026, 1, 15, tzinfo=UTC))
        try:
            with patch("src.api.routes.members.create_member", AsyncMock(return_value=member)):
                async with _client() as c:
                    resp = await c.post(
                        "/api/v1/members",
                        json={
                            "full_name": "Joshua Mwalimu",
                            "email": "joshua@example.com",
                            "phone_number": "0712345678",
                        },
                    )
            assert resp.status_code == 201
            data = resp.json()
            assert data["message"] == "Member created successfully"
            assert data["member"]["member_number"] == "MWJO12"
        finally:
            _teardown()

    @pytest.mark.asyncio
    async def test_balance_unknown_member(self):
        _setup_session()
        try:
            async with _client() as c:
                resp = await c.get("/api/v1/members/ghost/balance")
            assert resp.status_code == 404
        finally:
            _teardown()


class TestFraudAlerts:
    @pytest.mark.asyncio
    async def test_list_alerts(self):
        session = _setup_session()
        count = MagicMock()
        count.scalar_one.return_value = 1
        rows = MagicMock()
        alert = FraudAlert(
            id="alert-1",
            type="LARGE_WITHDRAWAL",
            severity="HIGH",
            description="Large withdrawal",
            member_id="member-1",
            transaction_id="txn-1",
            resolved=False,
            created_at=datetime(2026, 1, 15, tzinfo=UTC),
        )
        rows.scalars.return_value = MagicMock(all=MagicMock(return_value=[alert]))
        session.execute = AsyncMock(side_effect=[count, rows])
        try:
            async with _client() as c:
                resp = await c.get(
                    "/api/v1/fraud/alerts", params={"severity": "HIGH", "resolved": "false"}
                )
            assert resp.status_code == 200
            data = resp.json()
            assert data["total"] == 1
            assert data["items"][0]["id"] == "alert-1"
        finally:
            _teardown()

    @pytest.mark.asyncio
    async def test_limit_capped(self):
        _setup_session()
        try:
            async with _client() as c:
                resp = await c.get("/api/v1/fraud/alerts", params={"limit": 51})
            assert resp.status_code == 422
        finally:
            _teardown()

    @pytest.mark.asyncio
    async def test_resolve_unknown_alert(self):
        _setup_session()
        try:
            async with _client() as c:
                resp = await c.patch("/api/v1/fraud/alerts/missing", json={"notes": "ok"})
            assert resp.status_code == 404
        finally:
            _teardown()

    @pytest.mark.asyncio
    async def test_resolve_alert(self):
        session = _setup_session()
        session.get = AsyncMock(
            return_value=FraudAlert(
                id="alert-1",
                type="RAPID_TRANSACTIONS",
                severity="MEDIUM",
                description="6 transactions in the last 60 minutes",
                member_id="member-1",
                transaction_id="txn-1",
                resolved=False,
            )
        )
        try:
            async with _client() as c:
                resp = await c.patch(
                    "/api/v1/fraud/alerts/alert-1", json={"notes": "Chama contributions"}
                )
            assert resp.status_code == 200
            alert = resp.json()["alert"]
            assert alert["resolved"] is True
            assert alert["resolution_notes"] == "Chama contributions"
            session.commit.assert_awaited_once()
        finally:
            _teardown()

    @pytest.mark.asyncio
    async def test_rules_listing(self):
        async with _client() as c:
            resp = await c.get("/api/v1/fraud/rules")
        assert resp.status_code == 200
        data = resp.json()
        assert data["rule_count"] == 6
        assert data["thresholds"]["daily_limit"] == "1000000"
        assert data["thresholds"]["rapid_txn_count"] == 5


class TestRequestId:
    @pytest.mark.asyncio
    async def test_echoes_request_id(self):
        async with _client() as c:
            resp = await c.get("/health", headers={"X-Request-ID": "abc-123"})
        assert resp.headers["X-Request-ID"] == "abc-123"

    @pytest.mark.asyncio
    async def test_generates_request_id(self):
        async with _client() as c:
            resp = await c.get("/health")
        assert resp.headers["X-Request-ID"]


class TestAmountValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["499999.999", "1000000000000"])
    async def test_unstorable_amount_is_bad_request(self, amount):
        session = _setup_session()
        try:
            async with _client() as c:
                resp = await c.post(
                    "/api/v1/transactions/deposit",
                    json={"member_id": "member-1", "amount": amount},
                )
            assert resp.status_code == 400
            assert resp.json()["error"] == "bad_request"
            session.commit.assert_not_awaited()
        finally:
            _teardown()


class TestMemberManagement:
    @pytest.mark.asyncio
    async def test_suspend_member(self):
        session = _setup_session()
        member = make_member()
        session.get = AsyncMock(return_value=member)
        try:
            async with _client() as c:
                resp = await c.patch(
                    "/api/v1/members/member-1/status", json={"status": "SUSPENDED"}
                )
            assert resp.status_code == 200
            data = resp.json()
            assert data["message"] == "Status updated successfully"
            assert data["member"]["status"] == "SUSPENDED"
            session.commit.assert_awaited_once()
        finally:
            _teardown()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"status": "CLOSED"}, {}])
    async def test_invalid_status(self, body):
        session = _setup_session()
        session.get = AsyncMock(return_value=make_member())
        try:
            async with _client() as c:
                resp = await c.patch("/api/v1/members/member-1/status", json=body)
            assert resp.status_code == 400
            assert "ACTIVE, INACTIVE or SUSPENDED" in resp.json()["message"]
        finally:
            _teardown()

    @pytest.mark.asyncio
    async def test_status_unknown_member(self):
        _setup_session()
        try:
            async with _client() as c:
                resp = await c.patch("/api/v1/members/ghost/status", json={"status": "INACTIVE"})
            assert resp.status_code == 404
        finally:
            _teardown()

    @pytest.mark.asyncio
    async def test_member_detail(self):
        session = _setup_session()
        session.get = AsyncMock(return_value=make_member())
        try:
            async with _client() as c:
                found = await c.get("/api/v1/members/member-1")
                session.get.return_value = None
                missing = await c.get("/api/v1/members/ghost")
            assert found.status_code == 200
            assert found.json()["member"]["id"] == "member-1"
            assert missing.status_code == 404
        finally:
            _teardown()

    @pytest.mark.asyncio
    async def test_stats_not_captured_as_member_id(self):
        session = _setup_session()
        grouped = MagicMock()
        grouped.all.return_value = [("ACTIVE", 3), ("INACTIVE", 1)]
        session.execute = AsyncMock(return_value=grouped)
        try:
            async with _client() as c:
                resp = await c.get("/api/v1/members/stats")
            assert resp.status_code == 200
            assert resp.json() == {"active": 3, "inactive": 1, "suspended": 0}
            session.get.assert_not_awaited()
        finally:
            _teardown()

    @pytest.mark.asyncio
    async def test_list_members(self):
        _setup_session()
        try:
            async with _client() as c:
                resp = await c.get(
                    "/api/v1/members", params={"search": "mwal", "status": "SUSPENDED"}
                )
                bad = await c.get("/api/v1/members", params={"status": "CLOSED"})
            assert resp.status_code == 200
            assert resp.json()["items"] == []
            assert resp.json()["limit"] == 20
            assert bad.status_code == 422
        finally:
            _teardown()


class TestRuleThresholds:
    @pytest.mark.asyncio
    async def test_reports_injected_scorer_thresholds(self):
        custom = FraudScorer(thresholds=FraudThresholds(large_deposit_min=Decimal("250000")))
        app.dependency_overrides[get_fraud_scorer] = lambda: custom
        try:
            async with _client() as c:
                resp = await c.get("/api/v1/fraud/rules")
            assert resp.status_code == 200
            assert resp.json()["thresholds"]["large_deposit_min"] == "250000"
        finally:
            _teardown()
