"""
Activity Domain Entities
========================

Append-only activity entries and the client visibility allow-list.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from caseflow.config import ActivityType


# Types that may ever reach an external client. Anything not listed here,
# including types added later, stays internal.
CLIENT_FACING_TYPES = frozenset({
    ActivityType.NOTE,
    ActivityType.EMAIL,
    ActivityType.FILE,
    ActivityType.STATUS_CHANGE,
})


@dataclass(frozen=True)
class ActivityEntry:
    """
    Immutable record of something that happened on a case.

    Corrections are new entries that reference the original through
    ``metadata["corrects"]``; existing entries are never changed.
    """

    case_id: UUID
    activity_type: ActivityType
    content: str
    created_at: datetime
    created_by: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    client_visible: bool = False
    id: Optional[int] = None

    def __post_init__(self):
        if not self.content or not self.content.strip():
            raise ValueError("activity content cannot be empty")

    @property
    def is_client_visible(self) -> bool:
        return is_client_visible(self)


def is_client_visible(entry: ActivityEntry) -> bool:
    """An entry is shown to clients only if flagged AND of a client-facing type."""
    return entry.client_visible and entry.activity_type in CLIENT_FACING_TYPES


def client_projection(entries: Iterable[ActivityEntry]) -> List[ActivityEntry]:
    return [entry for entry in entries if is_client_visible(entry)]
