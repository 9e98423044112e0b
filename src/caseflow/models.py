"""
ORM model registry.

Importing this module registers every table on ``Base.metadata``.
"""

from caseflow.activity.infrastructure.models import ActivityEntryModel
from caseflow.alerts.infrastructure.models import AlertModel
from caseflow.cases.infrastructure.models import CaseModel
from caseflow.retainer.infrastructure.models import RetainerModel, ServiceLogEntryModel
from caseflow.sla.infrastructure.models import SLAPolicyModel
from caseflow.visibility.infrastructure.models import ClientFeedbackModel, ShareGrantModel

__all__ = [
    "ActivityEntryModel",
    "AlertModel",
    "CaseModel",
    "ClientFeedbackModel",
    "RetainerModel",
    "SLAPolicyModel",
    "ServiceLogEntryModel",
    "ShareGrantModel",
]
