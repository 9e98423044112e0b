"""
Alert Application Layer
=======================

Contains:
- Services: AlertDispatcher
- Interfaces: IAlertRepository, NotificationSender
- DTOs: AlertResponse
"""

from caseflow.alerts.application.dto import AlertResponse
from caseflow.alerts.application.services import (
    AlertDispatcher,
    IAlertRepository,
    NotificationSender,
)

__all__ = [
    "AlertDispatcher",
    "AlertResponse",
    "IAlertRepository",
    "NotificationSender",
]
