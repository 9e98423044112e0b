"""
Alert Application Services
==========================

The dispatcher follows an outbox pattern: ``dispatch`` stores the alert in
the caller's transaction and queues it; ``flush`` delivers queued alerts once
the caller has committed. Anything that fails delivery stays
``notification_sent=False`` and is picked up by ``deliver_pending``.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from caseflow.alerts.domain import Alert
from caseflow.shared.infrastructure.clock import Clock
from caseflow.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class IAlertRepository(ABC):
    """Interface for alert data access."""

    @abstractmethod
    async def create_if_absent(self, alert: Alert) -> Optional[Alert]:
        """
        Insert ``alert`` unless its dedup key already exists.

        Returns the stored alert, or None when the key was taken.
        """

    @abstractmethod
    async def get_pending(self, limit: int = 100) -> List[Alert]:
        """Alerts whose notification has not been delivered yet."""

    @abstractmethod
    async def mark_sent(self, alert_id: UUID, sent_at: datetime) -> None:
        """Mark alert as delivered."""

    @abstractmethod
    async def record_attempt(self, alert_id: UUID) -> None:
        """Count a failed delivery attempt."""

    @abstractmethod
    async def list(self, filters: dict, limit: int = 100, offset: int = 0) -> List[Alert]:
        """List alerts newest first."""


class NotificationSender(ABC):
    """Outbound notification collaborator."""

    @abstractmethod
    async def send(self, alert: Alert) -> bool:
        """
        Deliver one alert. Returns True on success.

        Implementations log failures and return False instead of raising.
        """

    async def close(self) -> None:
        """Release any held resources."""


# ========== Application Services ==========

class AlertDispatcher:
    """
    Turns SLA and retainer events into durable alerts and notifications.

    One dispatcher is built per unit of work (request or job) so the queue
    never outlives the transaction that filled it.
    """

    def __init__(
        self,
        alert_repository: IAlertRepository,
        sender: NotificationSender,
        clock: Clock
    ):
        self._repo = alert_repository
        self._sender = sender
        self._clock = clock
        self._queued: List[Alert] = []

    @property
    def queued(self) -> List[Alert]:
        return list(self._queued)

    async def dispatch(self, alert: Alert) -> Optional[Alert]:
        """
        Record ``alert`` if its dedup key is new and queue it for delivery.

        Returns the stored alert, or None if it was a duplicate.
        """
        stored = await self._repo.create_if_absent(alert)
        if stored is None:
            logger.debug("Duplicate alert suppressed", extra={"dedup_key": alert.dedup_key})
            return None

        self._queued.append(stored)
        logger.info(
            "Alert raised",
            extra={
                "alert_id": str(stored.id),
                "alert_type": stored.alert_type.value,
                "dedup_key": stored.dedup_key,
                "company_id": str(stored.company_id),
                "case_id": str(stored.case_id) if stored.case_id else None,
            }
        )
        return stored

    async def flush(self) -> int:
        """
        Deliver the alerts queued by this unit of work.

        Call after the originating transaction has committed; the delivery
        markers are written in the session's next transaction.
        """
        queued, self._queued = self._queued, []
        return await self._deliver(queued)

    async def deliver_pending(self, limit: int = 100) -> int:
        """Redeliver alerts that are still marked undelivered."""
        pending = await self._repo.get_pending(limit=limit)
        if pending:
            logger.info("Redelivering pending alerts", extra={"pending_count": len(pending)})
        return await self._deliver(pending)

    async def _deliver(self, alerts: List[Alert]) -> int:
        delivered = 0
        for alert in alerts:
            if await self._sender.send(alert):
                await self._repo.mark_sent(alert.id, self._clock.now())
                delivered += 1
            else:
                await self._repo.record_attempt(alert.id)
                logger.warning(
                    "Alert notification not delivered",
                    extra={"alert_id": str(alert.id), "dedup_key": alert.dedup_key}
                )
        return delivered

    async def list_alerts(
        self,
        company_id: Optional[UUID] = None,
        case_id: Optional[UUID] = None,
        pending_only: bool = False,
        limit: int = 100,
        offset: int = 0
    ) -> List[Alert]:
        filters = {}
        if company_id:
            filters["company_id"] = company_id
        if case_id:
            filters["case_id"] = case_id
        if pending_only:
            filters["notification_sent"] = False
        return await self._repo.list(filters, limit=limit, offset=offset)
