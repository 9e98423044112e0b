"""
Visibility Infrastructure Layer
===============================

Contains:
- Models: ShareGrantModel, ClientFeedbackModel
- Repositories: SQLAlchemy implementations
"""

from caseflow.visibility.infrastructure.models import ClientFeedbackModel, ShareGrantModel
from caseflow.visibility.infrastructure.repositories import (
    SQLAlchemyFeedbackRepository,
    SQLAlchemyShareGrantRepository,
)

__all__ = [
    "ClientFeedbackModel",
    "SQLAlchemyFeedbackRepository",
    "SQLAlchemyShareGrantRepository",
    "ShareGrantModel",
]
