"""
Case Infrastructure Layer
=========================

Contains:
- Models: SQLAlchemy ORM model (CaseModel)
- Repositories: SQLAlchemyCaseRepository
"""

from caseflow.cases.infrastructure.models import CaseModel
from caseflow.cases.infrastructure.repositories import SQLAlchemyCaseRepository

__all__ = ["CaseModel", "SQLAlchemyCaseRepository"]
