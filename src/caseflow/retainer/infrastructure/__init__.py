"""
Retainer Infrastructure Layer
=============================

Contains:
- Models: RetainerModel, ServiceLogEntryModel
- Repositories: SQLAlchemy implementations
"""

from caseflow.retainer.infrastructure.models import RetainerModel, ServiceLogEntryModel
from caseflow.retainer.infrastructure.repositories import (
    SQLAlchemyRetainerRepository,
    SQLAlchemyServiceLogRepository,
)

__all__ = [
    "RetainerModel",
    "SQLAlchemyRetainerRepository",
    "SQLAlchemyServiceLogRepository",
    "ServiceLogEntryModel",
]
