"""
SLA Application DTOs
====================

Data Transfer Objects for the SLA API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses.
"""

from datetime import datetime
from typing import Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from caseflow.config import CasePriority, CaseStatus, CaseType, SLADimension, SLAState, SLAStatus


# ========== Request DTOs ==========

class PolicyCreateDTO(BaseModel):
    """
    DTO for creating or replacing a company SLA policy.

    Leave ``case_type`` and ``priority`` empty for the company default.
    """
    company_id: UUID
    case_type: Optional[CaseType] = None
    priority: Optional[CasePriority] = None
    response_time_budget: float = Field(..., gt=0, description="Hours until first response")
    resolution_time_budget: float = Field(..., gt=0, description="Hours until closure")
    escalation_time_budget: Optional[float] = Field(None, gt=0, description="Hours without response before escalating")
    is_active: bool = True

    @model_validator(mode="after")
    def validate_policy(self) -> "PolicyCreateDTO":
        if self.resolution_time_budget < self.response_time_budget:
            raise ValueError("resolution_time_budget must be >= response_time_budget")
        if (self.case_type is None) != (self.priority is None):
            raise ValueError("case_type and priority must be given together")
        return self


# ========== Response DTOs ==========

class PolicyResponse(BaseModel):
    """Response model for an SLA policy."""
    id: Optional[UUID] = None
    company_id: Optional[UUID] = None
    case_type: Optional[CaseType] = None
    priority: Optional[CasePriority] = None
    response_time_budget: float
    resolution_time_budget: float
    escalation_time_budget: Optional[float] = None
    is_active: bool
    scope: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, policy) -> "PolicyResponse":
        return cls(
            id=policy.id,
            company_id=policy.company_id,
            case_type=policy.case_type,
            priority=policy.priority,
            response_time_budget=policy.response_time_budget,
            resolution_time_budget=policy.resolution_time_budget,
            escalation_time_budget=policy.escalation_time_budget,
            is_active=policy.is_active,
            scope=policy.scope,
            created_at=policy.created_at,
            updated_at=policy.updated_at,
        )


class DimensionResponse(BaseModel):
    """One SLA clock."""
    dimension: SLADimension
    state: SLAState
    budget_hours: float
    elapsed_hours: float
    remaining_hours: float
    deadline: datetime
    stopped_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, dimension) -> "DimensionResponse":
        return cls(
            dimension=dimension.dimension,
            state=dimension.state,
            budget_hours=dimension.budget_hours,
            elapsed_hours=round(dimension.elapsed_hours, 4),
            remaining_hours=round(dimension.remaining_hours, 4),
            deadline=dimension.deadline,
            stopped_at=dimension.stopped_at,
        )


class CaseSLAResponse(BaseModel):
    """SLA view of a case."""
    case_id: UUID
    company_id: UUID
    case_status: CaseStatus
    sla_status: SLAStatus
    evaluated_at: datetime
    escalation_due: bool
    response: DimensionResponse
    resolution: DimensionResponse
    policy: PolicyResponse

    @classmethod
    def from_domain(cls, case, evaluation) -> "CaseSLAResponse":
        return cls(
            case_id=case.id,
            company_id=case.company_id,
            case_status=case.status,
            sla_status=evaluation.status,
            evaluated_at=evaluation.evaluated_at,
            escalation_due=evaluation.escalation_due,
            response=DimensionResponse.from_domain(evaluation.response),
            resolution=DimensionResponse.from_domain(evaluation.resolution),
            policy=PolicyResponse.from_domain(evaluation.policy),
        )


class DashboardResponse(BaseModel):
    """Dashboard summary."""
    company_id: Optional[UUID] = None
    total_open: int
    breached_count: int
    missing_policy: int
    breach_rate: float = Field(description="Percent of evaluated open cases in a breached state")
    status_counts: Dict[SLAStatus, int]

    @classmethod
    def from_domain(cls, summary) -> "DashboardResponse":
        return cls(
            company_id=summary.company_id,
            total_open=summary.total_open,
            breached_count=summary.breached_count,
            missing_policy=summary.missing_policy,
            breach_rate=summary.breach_rate,
            status_counts=summary.status_counts,
        )


class SweepResponse(BaseModel):
    """Result of a manually triggered sweep."""
    evaluated: int
    alerts_raised: int
    missing_policy: int
    redelivered: int
    delivered: int = 0
    status_counts: Dict[str, int]
