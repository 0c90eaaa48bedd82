"""Fraud alert review: listing and resolution."""

from datetime import UTC, datetime

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models import FraudAlert as FraudAlertDB
from src.shared.enums import AlertSeverity
from src.shared.errors import AlertNotFoundError

logger = structlog.get_logger()

MAX_PAGE_SIZE = 50


def alert_to_dict(alert: FraudAlertDB) -> dict:
    return {
        "id": alert.id,
        "type": alert.type,
        "severity": alert.severity,
        "description": alert.description,
        "member_id": alert.member_id,
        "transaction_id": alert.transaction_id,
        "resolved": alert.resolved,
        "resolved_at": alert.resolved_at.isoformat() if alert.resolved_at else None,
        "resolution_notes": alert.resolution_notes,
        "created_at": alert.created_at.isoformat() if alert.created_at else None,
    }


async def list_alerts(
    session: AsyncSession,
    severity: AlertSeverity | None = None,
    resolved: bool | None = None,
    member_id: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> dict:
    """Page through alerts, newest first."""
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    filters = []
    if severity is not None:
        filters.append(FraudAlertDB.severity == severity.value)
    if resolved is not None:
        filters.append(FraudAlertDB.resolved.is_(resolved))
    if member_id:
        filters.append(FraudAlertDB.member_id == member_id)

    count_stmt = select(func.count()).select_from(FraudAlertDB).where(*filters)
    total = (await session.execute(count_stmt)).scalar_one()

    stmt = (
        select(FraudAlertDB)
        .where(*filters)
        .order_by(FraudAlertDB.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    alerts = (await session.execute(stmt)).scalars().all()

    return {
        "items": [alert_to_dict(a) for a in alerts],
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": -(-total // limit),
    }


async def resolve_alert(
    session: AsyncSession, alert_id: str, notes: str | None = None
) -> FraudAlertDB:
    """Mark an alert resolved. The flagged transaction keeps its status."""
    alert = await session.get(FraudAlertDB, alert_id)
    if alert is None:
        raise AlertNotFoundError(f"Alert {alert_id} not found")

    alert.resolved = True
    alert.resolved_at = datetime.now(UTC)
    alert.resolution_notes = notes
    await session.commit()

    logger.info("fraud_alert_resolved", alert_id=alert_id, member_id=alert.member_id)
    return alert
