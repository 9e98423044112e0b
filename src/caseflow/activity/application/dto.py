"""
Activity Application DTOs
=========================
"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from caseflow.activity.domain import ActivityEntry
from caseflow.config import ActivityType


class NoteCreateDTO(BaseModel):
    """Request body for adding a note to a case."""
    content: str = Field(..., min_length=1, description="Note text")
    created_by: Optional[str] = Field(None, description="Author user id")
    client_visible: bool = Field(
        default=False,
        description="Show this note on the client timeline"
    )


class ActivityEntryResponse(BaseModel):
    """Response model for an activity entry."""
    id: int
    case_id: UUID
    activity_type: ActivityType
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_by: Optional[str] = None
    created_at: datetime
    client_visible: bool

    @classmethod
    def from_domain(cls, entry: ActivityEntry) -> "ActivityEntryResponse":
        return cls(
            id=entry.id,
            case_id=entry.case_id,
            activity_type=entry.activity_type,
            content=entry.content,
            metadata=entry.metadata,
            created_by=entry.created_by,
            created_at=entry.created_at,
            client_visible=entry.client_visible,
        )
