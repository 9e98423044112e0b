"""
Case Domain Entities
====================

Pure Python domain entity for the case lifecycle.

Following Domain-Driven Design principles, the entity owns its state machine
and invariants and is free of infrastructure concerns.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, Optional, Set
from uuid import UUID

from caseflow.config import (
    CasePriority, CaseSource, CaseStatus, CaseType, CaseVisibility
)
from caseflow.core import InvalidStateException, InvalidTransitionException


# closed is terminal except for reopening
ALLOWED_TRANSITIONS: Dict[CaseStatus, FrozenSet[CaseStatus]] = {
    CaseStatus.OPEN: frozenset({CaseStatus.IN_PROGRESS, CaseStatus.WAITING, CaseStatus.CLOSED}),
    CaseStatus.IN_PROGRESS: frozenset({CaseStatus.OPEN, CaseStatus.WAITING, CaseStatus.CLOSED}),
    CaseStatus.WAITING: frozenset({CaseStatus.OPEN, CaseStatus.IN_PROGRESS, CaseStatus.CLOSED}),
    CaseStatus.CLOSED: frozenset({CaseStatus.OPEN}),
}


@dataclass
class Case:
    """
    A unit of support/HR work tracked to resolution.

    Cases are never deleted; ``closed`` is a terminal status that can only be
    left by reopening.
    """

    # Identity
    id: UUID
    company_id: UUID

    # Content
    title: str
    description: str

    # Classification
    type: CaseType
    priority: CasePriority
    source: CaseSource

    # Timestamps
    created_at: datetime
    updated_at: datetime

    # State
    status: CaseStatus = CaseStatus.OPEN
    visibility: CaseVisibility = CaseVisibility.INTERNAL
    client_viewable: bool = False

    client_id: Optional[UUID] = None
    closed_at: Optional[datetime] = None
    first_response_at: Optional[datetime] = None
    due_date: Optional[datetime] = None

    # Effort
    estimated_hours: Optional[float] = None
    actual_hours: float = 0.0

    # Assignment
    assigned_to: Optional[str] = None
    assigned_team: Optional[str] = None

    tags: Set[str] = field(default_factory=set)
    internal_notes: Optional[str] = None
    external_reference: Optional[str] = None

    # Optimistic concurrency
    version: int = 1

    def __post_init__(self):
        """Validate case invariants on initialization."""
        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot be before created_at")

        if (self.status == CaseStatus.CLOSED) != (self.closed_at is not None):
            raise ValueError("closed_at must be set exactly when status is closed")

        if self.client_viewable != (self.visibility == CaseVisibility.CLIENT_VIEWABLE):
            raise ValueError("client_viewable must match visibility")

        if self.actual_hours < 0:
            raise ValueError("actual_hours cannot be negative")

        self.tags = set(self.tags)

    @property
    def is_closed(self) -> bool:
        return self.status == CaseStatus.CLOSED

    @property
    def has_response(self) -> bool:
        return self.first_response_at is not None

    def can_transition_to(self, new_status: CaseStatus) -> bool:
        return new_status in ALLOWED_TRANSITIONS[self.status]

    def transition_to(self, new_status: CaseStatus, timestamp: datetime) -> CaseStatus:
        """
        Move the case to ``new_status`` and return the previous status.

        Entering ``closed`` stamps ``closed_at``; reopening clears it. The
        first move away from ``open`` counts as the first response.
        """
        if not self.can_transition_to(new_status):
            raise InvalidTransitionException(self.id, self.status.value, new_status.value)

        previous = self.status
        self.status = new_status

        if new_status == CaseStatus.CLOSED:
            self.closed_at = timestamp
        elif previous == CaseStatus.CLOSED:
            self.closed_at = None

        if previous == CaseStatus.OPEN and self.first_response_at is None:
            self.first_response_at = timestamp

        self.updated_at = timestamp
        return previous

    def mark_responded(self, timestamp: datetime) -> bool:
        """Set the explicit response marker. Returns False if already responded."""
        if self.first_response_at is not None:
            return False
        self.first_response_at = timestamp
        self.updated_at = timestamp
        return True

    def reassign(
        self,
        assignee: str,
        timestamp: datetime,
        team: Optional[str] = None
    ) -> Optional[str]:
        """Assign to a new user; returns the previous assignee."""
        if assignee == self.assigned_to and team == self.assigned_team:
            raise InvalidStateException(
                f"Case {self.id} is already assigned to {assignee}",
                {"case_id": str(self.id), "assigned_to": assignee}
            )
        previous = self.assigned_to
        self.assigned_to = assignee
        self.assigned_team = team
        self.updated_at = timestamp
        return previous

    def set_client_viewable(self, viewable: bool, timestamp: datetime) -> None:
        """Toggle both visibility fields together."""
        self.client_viewable = viewable
        self.visibility = CaseVisibility.CLIENT_VIEWABLE if viewable else CaseVisibility.INTERNAL
        self.updated_at = timestamp
