"""Fraud alert review and rule listing endpoints."""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_fraud_scorer
from src.db.database import get_session
from src.domains.fraud.alerts import MAX_PAGE_SIZE, alert_to_dict, list_alerts, resolve_alert
from src.domains.fraud.scorer import FraudScorer
from src.shared.enums import AlertSeverity

router = APIRouter(prefix="/api/v1/fraud", tags=["fraud"])


class AlertResolution(BaseModel):
    notes: str | None = None


@router.get("/alerts")
async def get_alerts(
    session: AsyncSession = Depends(get_session),  # noqa: B008
    severity: AlertSeverity | None = None,
    resolved: bool | None = None,
    member_id: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE),
) -> dict:
    return await list_alerts(
        session,
        severity=severity,
        resolved=resolved,
        member_id=member_id,
        page=page,
        limit=limit,
    )


@router.patch("/alerts/{alert_id}")
async def patch_alert(
    alert_id: str,
    body: AlertResolution,
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    alert = await resolve_alert(session, alert_id, body.notes)
    return {"alert": alert_to_dict(alert)}


@router.get("/rules")
async def list_rules(
    scorer: FraudScorer = Depends(get_fraud_scorer),  # noqa: B008
) -> dict:
    """Return the fixed rule set and its thresholds."""
    rules = scorer.rules_engine.rules
    t = scorer.thresholds
    return {
        "rule_count": len(rules),
        "rules": [
            {
                "rule_id": rule.rule_id,
                "alert_type": rule.alert_type.value,
                "severity": rule.severity.value,
            }
            for rule in rules
        ],
        "thresholds": {
            "large_deposit_min": str(t.large_deposit_min),
            "large_withdrawal_min": str(t.large_withdrawal_min),
            "large_loan_min": str(t.large_loan_min),
            "daily_limit": str(t.daily_limit),
            "near_total_withdrawal_ratio": str(t.near_total_withdrawal_ratio),
            "rapid_txn_count": t.rapid_txn_count,
            "rapid_txn_window_minutes": t.rapid_txn_window_minutes,
        },
    }
