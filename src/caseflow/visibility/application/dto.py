"""
Visibility Application DTOs
===========================

The timeline response deliberately mirrors CaseTimelineView: adding a field
there does not make it public until it is added here too.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from caseflow.activity.domain import ActivityEntry
from caseflow.config import ActivityType, CasePriority, CaseStatus, CaseType, FeedbackSentiment
from caseflow.visibility.domain import CaseTimelineView, ClientFeedback, IssuedToken


# ========== Request DTOs ==========

class ShareGrantDTO(BaseModel):
    """DTO for granting client access."""
    model_config = ConfigDict(str_strip_whitespace=True)

    contact_email: Optional[str] = Field(None, max_length=320, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    actor: Optional[str] = None


class FeedbackDTO(BaseModel):
    """DTO for client feedback."""
    model_config = ConfigDict(str_strip_whitespace=True)

    sentiment: FeedbackSentiment
    comment: Optional[str] = Field(None, max_length=5000)


# ========== Response DTOs ==========

class ShareGrantResponse(BaseModel):
    """Returned once at grant time; the token is not retrievable later."""
    grant_id: UUID
    case_id: UUID
    token: str
    contact_email: Optional[str] = None
    created_at: datetime
    expires_at: Optional[datetime] = None
    replaced_grants: int

    @classmethod
    def from_domain(cls, issued: IssuedToken) -> "ShareGrantResponse":
        return cls(
            grant_id=issued.grant.id,
            case_id=issued.grant.case_id,
            token=issued.token,
            contact_email=issued.grant.contact_email,
            created_at=issued.grant.created_at,
            expires_at=issued.grant.expires_at,
            replaced_grants=issued.replaced_grants,
        )


class TimelineEntryResponse(BaseModel):
    """Client-safe activity entry (no author, no metadata)."""
    activity_type: ActivityType
    content: str
    created_at: datetime

    @classmethod
    def from_domain(cls, entry: ActivityEntry) -> "TimelineEntryResponse":
        return cls(activity_type=entry.activity_type, content=entry.content, created_at=entry.created_at)


class CaseTimelineResponse(BaseModel):
    case_id: UUID
    title: str
    status: CaseStatus
    type: CaseType
    priority: CasePriority
    created_at: datetime
    updated_at: datetime
    closed_at: Optional[datetime] = None
    entries: List[TimelineEntryResponse]

    @classmethod
    def from_domain(cls, view: CaseTimelineView) -> "CaseTimelineResponse":
        return cls(
            case_id=view.case_id,
            title=view.title,
            status=view.status,
            type=view.type,
            priority=view.priority,
            created_at=view.created_at,
            updated_at=view.updated_at,
            closed_at=view.closed_at,
            entries=[TimelineEntryResponse.from_domain(e) for e in view.entries],
        )


class FeedbackResponse(BaseModel):
    id: UUID
    case_id: UUID
    sentiment: FeedbackSentiment
    comment: Optional[str] = None
    submitted_at: datetime

    @classmethod
    def from_domain(cls, feedback: ClientFeedback) -> "FeedbackResponse":
        return cls(
            id=feedback.id,
            case_id=feedback.case_id,
            sentiment=feedback.sentiment,
            comment=feedback.comment,
            submitted_at=feedback.submitted_at,
        )


class RevokeResponse(BaseModel):
    case_id: UUID
    revoked_grants: int
    visibility: str
    client_viewable: bool
