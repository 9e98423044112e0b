"""
SLA Infrastructure Layer
========================

Contains:
- Models: SQLAlchemy ORM models
- Repositories: concrete repository implementations
- External: YAML config manager with hot reload
"""

from caseflow.sla.infrastructure.external import SLAConfigManager
from caseflow.sla.infrastructure.models import SLAPolicyModel
from caseflow.sla.infrastructure.repositories import SQLAlchemySLAPolicyRepository

__all__ = [
    "SLAConfigManager",
    "SLAPolicyModel",
    "SQLAlchemySLAPolicyRepository",
]
