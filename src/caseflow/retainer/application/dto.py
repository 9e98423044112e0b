"""
Retainer Application DTOs
=========================

Data Transfer Objects for the retainer API layer.
"""

from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from caseflow.alerts.application import AlertResponse
from caseflow.retainer.domain import (
    LedgerResult, Retainer, RolloverResult, ServiceLogEntry, UsageSummary, WaiveResult
)


# ========== Request DTOs ==========

class RetainerConfigureDTO(BaseModel):
    """
    DTO for creating or updating a retainer.

    ``period`` may be any day of the month; it is normalised to the first.
    ``rollover_bank`` only applies when the period is created. Supplying it
    marks the period as rolled over, so a later rollover keeps it.
    """
    company_id: UUID
    period: date
    retainer_hours: float = Field(..., ge=0)
    overage_rate: float = Field(default=0.0, ge=0, description="Currency per overage hour")
    max_rollover_hours: Optional[float] = Field(None, ge=0, description="Defaults to the configured cap")
    rollover_bank: float = Field(default=0.0, ge=0)
    tier_name: Optional[str] = None
    is_active: bool = True


class ServiceEntryCreateDTO(BaseModel):
    """DTO for posting a service-log entry."""
    model_config = ConfigDict(str_strip_whitespace=True)

    company_id: UUID
    case_id: Optional[UUID] = None
    consultant_id: Optional[str] = None
    hours_logged: float = Field(..., gt=0)
    billable: bool = True
    service_date: date
    description: str = Field(..., min_length=1)
    service_type: Optional[str] = None
    notes: Optional[str] = None


class WaiveDTO(BaseModel):
    """DTO for waiving a service entry."""
    model_config = ConfigDict(str_strip_whitespace=True)

    reason: str = Field(..., min_length=1)
    actor: Optional[str] = None


class RolloverDTO(BaseModel):
    """DTO for rolling a company into a new period."""
    period_start: date


# ========== Response DTOs ==========

class RetainerResponse(BaseModel):
    """Response model for a retainer period."""
    id: Optional[UUID] = None
    company_id: UUID
    period_start: date
    retainer_hours: float
    rollover_bank: float
    effective_available: float
    hours_used: float
    remaining_hours: float
    overage_hours: float
    overage_rate: float
    overage_charge: float
    utilization_percent: float
    max_rollover_hours: float
    tier_name: Optional[str] = None
    is_active: bool
    rollover_applied_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, retainer: Retainer) -> "RetainerResponse":
        return cls(
            id=retainer.id,
            company_id=retainer.company_id,
            period_start=retainer.period_start,
            retainer_hours=retainer.retainer_hours,
            rollover_bank=retainer.rollover_bank,
            effective_available=retainer.effective_available,
            hours_used=retainer.hours_used,
            remaining_hours=retainer.remaining_hours,
            overage_hours=retainer.overage_hours,
            overage_rate=retainer.overage_rate,
            overage_charge=retainer.overage_charge,
            utilization_percent=retainer.utilization_percent,
            max_rollover_hours=retainer.max_rollover_hours,
            tier_name=retainer.tier_name,
            is_active=retainer.is_active,
            rollover_applied_at=retainer.rollover_applied_at,
        )


class ServiceEntryResponse(BaseModel):
    """Response model for a service-log entry."""
    id: UUID
    company_id: UUID
    case_id: Optional[UUID] = None
    consultant_id: Optional[str] = None
    hours_logged: float
    billable: bool
    consumed_hours: float = 0.0
    service_date: date
    description: str
    service_type: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    waived_at: Optional[datetime] = None
    waive_reason: Optional[str] = None
    waived_by: Optional[str] = None

    @classmethod
    def from_domain(cls, entry: ServiceLogEntry) -> "ServiceEntryResponse":
        return cls(
            id=entry.id,
            company_id=entry.company_id,
            case_id=entry.case_id,
            consultant_id=entry.consultant_id,
            hours_logged=entry.hours_logged,
            billable=entry.billable,
            consumed_hours=entry.consumed_hours,
            service_date=entry.service_date,
            description=entry.description,
            service_type=entry.service_type,
            notes=entry.notes,
            created_at=entry.created_at,
            waived_at=entry.waived_at,
            waive_reason=entry.waive_reason,
            waived_by=entry.waived_by,
        )


class LedgerResultResponse(BaseModel):
    entry: ServiceEntryResponse
    retainer: Optional[RetainerResponse] = None
    consumed_hours: float
    alerts: List[AlertResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, result: LedgerResult) -> "LedgerResultResponse":
        return cls(
            entry=ServiceEntryResponse.from_domain(result.entry),
            retainer=RetainerResponse.from_domain(result.retainer) if result.retainer else None,
            consumed_hours=result.consumed_hours,
            alerts=[AlertResponse.from_domain(alert) for alert in result.alerts],
        )


class WaiveResponse(BaseModel):
    entry: ServiceEntryResponse
    retainer: Optional[RetainerResponse] = None
    released_hours: float

    @classmethod
    def from_domain(cls, result: WaiveResult) -> "WaiveResponse":
        return cls(
            entry=ServiceEntryResponse.from_domain(result.entry),
            retainer=RetainerResponse.from_domain(result.retainer) if result.retainer else None,
            released_hours=result.released_hours,
        )


class RolloverResponse(BaseModel):
    company_id: UUID
    period_start: date
    carried_hours: float
    applied: bool
    retainer: RetainerResponse

    @classmethod
    def from_domain(cls, result: RolloverResult) -> "RolloverResponse":
        return cls(
            company_id=result.company_id,
            period_start=result.period_start,
            carried_hours=result.carried_hours,
            applied=result.applied,
            retainer=RetainerResponse.from_domain(result.retainer),
        )


class UsageSummaryResponse(BaseModel):
    """Monthly service report."""
    retainer: RetainerResponse
    entry_count: int
    total_hours_logged: float
    billable_hours: float
    non_billable_hours: float
    waived_hours: float
    hours_by_source: Dict[str, float]
    hours_by_service_type: Dict[str, float]

    @classmethod
    def from_domain(cls, summary: UsageSummary) -> "UsageSummaryResponse":
        return cls(
            retainer=RetainerResponse.from_domain(summary.retainer),
            entry_count=summary.entry_count,
            total_hours_logged=summary.total_hours_logged,
            billable_hours=summary.billable_hours,
            non_billable_hours=summary.non_billable_hours,
            waived_hours=summary.waived_hours,
            hours_by_source=summary.hours_by_source,
            hours_by_service_type=summary.hours_by_service_type,
        )
