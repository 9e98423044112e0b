"""
Alert Domain Layer
==================

Contains:
- Entities: Alert
- Dedup key builders
"""

from caseflow.alerts.domain.entities import (
    Alert,
    AlertSeverity,
    retainer_overage_key,
    retainer_threshold_key,
    sla_breach_key,
    sla_escalation_key,
)

__all__ = [
    "Alert",
    "AlertSeverity",
    "retainer_overage_key",
    "retainer_threshold_key",
    "sla_breach_key",
    "sla_escalation_key",
]
