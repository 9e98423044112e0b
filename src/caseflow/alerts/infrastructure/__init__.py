"""
Alert Infrastructure Layer
==========================

Contains:
- Models: AlertModel
- Repositories: SQLAlchemyAlertRepository
- External: notification senders and circuit breaker
"""

from caseflow.alerts.infrastructure.external import (
    CircuitBreaker,
    CircuitState,
    LogNotificationSender,
    SlackNotificationSender,
    build_notification_sender,
)
from caseflow.alerts.infrastructure.models import AlertModel
from caseflow.alerts.infrastructure.repositories import SQLAlchemyAlertRepository

__all__ = [
    "AlertModel",
    "CircuitBreaker",
    "CircuitState",
    "LogNotificationSender",
    "SQLAlchemyAlertRepository",
    "SlackNotificationSender",
    "build_notification_sender",
]
