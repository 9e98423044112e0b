"""
Alert Application DTOs
======================
"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel

from caseflow.alerts.domain import Alert
from caseflow.config import AlertType


class AlertResponse(BaseModel):
    """Response model for an alert."""
    id: UUID
    alert_type: AlertType
    severity: str
    dedup_key: str
    company_id: UUID
    case_id: Optional[UUID] = None
    message: str
    payload: Dict[str, Any]
    created_at: datetime
    notification_sent: bool
    notification_sent_at: Optional[datetime] = None
    delivery_attempts: int

    @classmethod
    def from_domain(cls, alert: Alert) -> "AlertResponse":
        return cls(
            id=alert.id,
            alert_type=alert.alert_type,
            severity=alert.severity,
            dedup_key=alert.dedup_key,
            company_id=alert.company_id,
            case_id=alert.case_id,
            message=alert.message,
            payload=alert.payload,
            created_at=alert.created_at,
            notification_sent=alert.notification_sent,
            notification_sent_at=alert.notification_sent_at,
            delivery_attempts=alert.delivery_attempts,
        )
