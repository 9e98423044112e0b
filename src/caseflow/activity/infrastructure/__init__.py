"""
Activity Infrastructure Layer
=============================
"""

from caseflow.activity.infrastructure.models import ActivityEntryModel
from caseflow.activity.infrastructure.repositories import SQLAlchemyActivityRepository

__all__ = ["ActivityEntryModel", "SQLAlchemyActivityRepository"]
