"""
Visibility Domain Entities
==========================

Share grants hold only a SHA-256 digest of their token; the plaintext is
handed out once when the grant is created.
"""

import hashlib
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from caseflow.activity.domain import ActivityEntry, client_projection
from caseflow.cases.domain import Case
from caseflow.config import CasePriority, CaseStatus, CaseType, FeedbackSentiment


def generate_token(nbytes: int = 32) -> str:
    return secrets.token_urlsafe(nbytes)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass
class ShareGrant:
    """A client's read-only access to one case."""

    case_id: UUID
    token_hash: str
    created_at: datetime

    contact_email: Optional[str] = None
    created_by: Optional[str] = None
    expires_at: Optional[datetime] = None

    revoked: bool = False
    revoked_at: Optional[datetime] = None

    id: Optional[UUID] = None

    def is_valid(self, now: datetime) -> bool:
        if self.revoked:
            return False
        return self.expires_at is None or now < self.expires_at


@dataclass(frozen=True)
class IssuedToken:
    """A fresh grant together with its plaintext token."""
    grant: ShareGrant
    token: str
    replaced_grants: int = 0


@dataclass
class ClientFeedback:
    """Client sentiment on a closed case; one per grant."""
    grant_id: UUID
    case_id: UUID
    sentiment: FeedbackSentiment
    submitted_at: datetime
    comment: Optional[str] = None
    contact_email: Optional[str] = None
    id: Optional[UUID] = None


@dataclass(frozen=True)
class CaseTimelineView:
    """
    What a token holder sees.

    Only these case fields are projected; internal notes, assignment and
    effort never leave the engine through this view.
    """
    case_id: UUID
    title: str
    status: CaseStatus
    type: CaseType
    priority: CasePriority
    created_at: datetime
    updated_at: datetime
    closed_at: Optional[datetime]
    entries: List[ActivityEntry] = field(default_factory=list)

    @classmethod
    def build(cls, case: Case, entries: List[ActivityEntry]) -> "CaseTimelineView":
        return cls(
            case_id=case.id,
            title=case.title,
            status=case.status,
            type=case.type,
            priority=case.priority,
            created_at=case.created_at,
            updated_at=case.updated_at,
            closed_at=case.closed_at,
            entries=client_projection(entries),
        )
