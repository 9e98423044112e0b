"""
Visibility Application Layer
============================

Contains:
- Services: VisibilityGateway
- Interfaces: IShareGrantRepository, IFeedbackRepository
- DTOs: request/response models
"""

from caseflow.visibility.application.dto import (
    CaseTimelineResponse,
    FeedbackDTO,
    FeedbackResponse,
    RevokeResponse,
    ShareGrantDTO,
    ShareGrantResponse,
    TimelineEntryResponse,
)
from caseflow.visibility.application.services import (
    IFeedbackRepository,
    IShareGrantRepository,
    VisibilityGateway,
)

__all__ = [
    # DTOs
    "CaseTimelineResponse",
    "FeedbackDTO",
    "FeedbackResponse",
    "RevokeResponse",
    "ShareGrantDTO",
    "ShareGrantResponse",
    "TimelineEntryResponse",
    # Services
    "VisibilityGateway",
    # Interfaces
    "IFeedbackRepository",
    "IShareGrantRepository",
]
