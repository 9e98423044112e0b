"""
Case Application DTOs
=====================

Data Transfer Objects for the case API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses. Field names follow the case entity.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from caseflow.cases.domain import Case
from caseflow.config import (
    CasePriority, CaseSource, CaseStatus, CaseType, CaseVisibility, SLAStatus
)


# ========== Request DTOs ==========

class CaseCreateDTO(BaseModel):
    """DTO for creating a case. A supplied ``status`` is accepted and ignored."""
    model_config = ConfigDict(str_strip_whitespace=True)

    company_id: UUID = Field(..., description="Owning company")
    client_id: Optional[UUID] = Field(None, description="Linked client contact")
    title: str = Field(..., min_length=1, max_length=500, description="Case title")
    description: str = Field(..., min_length=1, description="Case description")
    type: CaseType = Field(..., description="Case type")
    priority: CasePriority = Field(default=CasePriority.MEDIUM, description="Priority")
    source: CaseSource = Field(default=CaseSource.MANUAL, description="Intake channel")
    status: Optional[str] = Field(None, description="Ignored; new cases always start open")
    assigned_to: Optional[str] = None
    assigned_team: Optional[str] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    tags: List[str] = Field(default_factory=list)
    internal_notes: Optional[str] = None
    external_reference: Optional[str] = None
    due_date: Optional[datetime] = None
    created_by: Optional[str] = None


class CaseTransitionDTO(BaseModel):
    """DTO for a status transition."""
    version: int = Field(..., ge=1, description="Last version the caller read")
    status: CaseStatus = Field(..., description="Target status")
    actor: Optional[str] = Field(None, description="User performing the change")


class CaseReassignDTO(BaseModel):
    """DTO for reassigning a case."""
    model_config = ConfigDict(str_strip_whitespace=True)

    version: int = Field(..., ge=1, description="Last version the caller read")
    assigned_to: str = Field(..., min_length=1)
    assigned_team: Optional[str] = None
    actor: Optional[str] = None


class CaseRespondDTO(BaseModel):
    """DTO for the explicit responded marker."""
    actor: Optional[str] = None


class CaseListQueryDTO(BaseModel):
    """Query parameters for listing cases."""
    company_id: Optional[UUID] = None
    status: Optional[CaseStatus] = None
    type: Optional[CaseType] = None
    priority: Optional[CasePriority] = None
    assigned_to: Optional[str] = None
    search: Optional[str] = None
    limit: int = Field(default=100, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)


# ========== Response DTOs ==========

class CaseResponse(BaseModel):
    """Response model for a case."""
    id: UUID
    company_id: UUID
    client_id: Optional[UUID] = None
    title: str
    description: str
    type: CaseType
    priority: CasePriority
    source: CaseSource
    status: CaseStatus
    visibility: CaseVisibility
    client_viewable: bool
    created_at: datetime
    updated_at: datetime
    closed_at: Optional[datetime] = None
    first_response_at: Optional[datetime] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = None
    actual_hours: float
    assigned_to: Optional[str] = None
    assigned_team: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    internal_notes: Optional[str] = None
    external_reference: Optional[str] = None
    version: int
    sla_status: Optional[SLAStatus] = Field(None, description="SLA status after the operation")

    @classmethod
    def from_domain(cls, case: Case, sla_status: Optional[SLAStatus] = None) -> "CaseResponse":
        return cls(
            id=case.id,
            company_id=case.company_id,
            client_id=case.client_id,
            title=case.title,
            description=case.description,
            type=case.type,
            priority=case.priority,
            source=case.source,
            status=case.status,
            visibility=case.visibility,
            client_viewable=case.client_viewable,
            created_at=case.created_at,
            updated_at=case.updated_at,
            closed_at=case.closed_at,
            first_response_at=case.first_response_at,
            due_date=case.due_date,
            estimated_hours=case.estimated_hours,
            actual_hours=case.actual_hours,
            assigned_to=case.assigned_to,
            assigned_team=case.assigned_team,
            tags=sorted(case.tags),
            internal_notes=case.internal_notes,
            external_reference=case.external_reference,
            version=case.version,
            sla_status=sla_status,
        )
