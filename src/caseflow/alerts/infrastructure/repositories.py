"""
Alert Infrastructure Repositories
=================================
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.alerts.application import IAlertRepository
from caseflow.alerts.domain import Alert
from caseflow.alerts.infrastructure.models import AlertModel
from caseflow.config import AlertType
from caseflow.infrastructure.database import dialect_insert


def _to_domain(model: AlertModel) -> Alert:
    return Alert(
        id=model.id,
        alert_type=AlertType(model.alert_type),
        dedup_key=model.dedup_key,
        company_id=model.company_id,
        case_id=model.case_id,
        severity=model.severity,
        message=model.message,
        payload=dict(model.payload or {}),
        created_at=model.created_at,
        notification_sent=model.notification_sent,
        notification_sent_at=model.notification_sent_at,
        delivery_attempts=model.delivery_attempts,
    )


class SQLAlchemyAlertRepository(IAlertRepository):
    """
    SQLAlchemy implementation of alert repository.

    Handles persistence of Alert entities.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create_if_absent(self, alert: Alert) -> Optional[Alert]:
        alert_id = alert.id or uuid4()
        insert = dialect_insert(self._session)
        stmt = (
            insert(AlertModel)
            .values(
                id=alert_id,
                dedup_key=alert.dedup_key,
                company_id=alert.company_id,
                case_id=alert.case_id,
                alert_type=alert.alert_type.value,
                severity=alert.severity,
                message=alert.message,
                payload=alert.payload,
                created_at=alert.created_at,
                notification_sent=False,
                delivery_attempts=0,
            )
            .on_conflict_do_nothing(index_elements=["dedup_key"])
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None

        alert.id = alert_id
        alert.notification_sent = False
        return alert

    async def get_pending(self, limit: int = 100) -> List[Alert]:
        """Get alerts that haven't been sent yet."""
        stmt = (
            select(AlertModel)
            .where(AlertModel.notification_sent == False)  # noqa: E712
            .order_by(AlertModel.created_at.asc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return [_to_domain(model) for model in result.scalars().all()]

    async def mark_sent(self, alert_id: UUID, sent_at: datetime) -> None:
        stmt = (
            update(AlertModel)
            .where(AlertModel.id == alert_id)
            .values(
                notification_sent=True,
                notification_sent_at=sent_at,
                delivery_attempts=AlertModel.delivery_attempts + 1,
            )
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def record_attempt(self, alert_id: UUID) -> None:
        stmt = (
            update(AlertModel)
            .where(AlertModel.id == alert_id)
            .values(delivery_attempts=AlertModel.delivery_attempts + 1)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def list(self, filters: dict, limit: int = 100, offset: int = 0) -> List[Alert]:
        """List alerts with filters."""
        stmt = select(AlertModel)

        conditions = []
        if "company_id" in filters:
            conditions.append(AlertModel.company_id == filters["company_id"])
        if "case_id" in filters:
            conditions.append(AlertModel.case_id == filters["case_id"])
        if "alert_type" in filters:
            conditions.append(AlertModel.alert_type == AlertType(filters["alert_type"]).value)
        if "notification_sent" in filters:
            conditions.append(AlertModel.notification_sent == filters["notification_sent"])

        if conditions:
            stmt = stmt.where(and_(*conditions))

        # Delivery markers are written with bulk UPDATEs; refresh loaded rows
        stmt = (
            stmt.order_by(AlertModel.created_at.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return [_to_domain(model) for model in result.scalars().all()]
