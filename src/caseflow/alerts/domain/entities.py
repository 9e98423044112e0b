"""
Alert Domain Entities
=====================

Alerts are durable records of SLA and retainer events. The dedup key is the
identity that makes dispatch idempotent: a second alert with the same key is
never stored or sent.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional
from uuid import UUID

from caseflow.config import AlertType, SLADimension


class AlertSeverity:
    """Severity labels carried on alerts."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class Alert:
    """A raised alert and its delivery state."""

    alert_type: AlertType
    dedup_key: str
    company_id: UUID
    message: str
    created_at: datetime
    case_id: Optional[UUID] = None
    severity: str = AlertSeverity.WARNING
    payload: Dict[str, Any] = field(default_factory=dict)

    # Delivery tracking
    notification_sent: bool = False
    notification_sent_at: Optional[datetime] = None
    delivery_attempts: int = 0

    id: Optional[UUID] = None

    def __post_init__(self):
        if not self.dedup_key:
            raise ValueError("dedup_key is required")


# ========== Dedup keys ==========

def sla_breach_key(case_id: UUID, dimension: SLADimension) -> str:
    return f"sla:{case_id}:{SLADimension(dimension).value}:breach"


def sla_escalation_key(case_id: UUID) -> str:
    return f"sla:{case_id}:escalation"


def retainer_threshold_key(company_id: UUID, period_start: date, threshold: int) -> str:
    return f"retainer:{company_id}:{period_start.isoformat()}:threshold:{threshold}"


def retainer_overage_key(company_id: UUID, period_start: date) -> str:
    return f"retainer:{company_id}:{period_start.isoformat()}:overage"
