"""
SLA Value Objects
=================

Immutable value objects for the SLA domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from caseflow.cases.domain import Case
from caseflow.config import CasePriority, CaseType, SLADimension, SLAState, SLAStatus
from caseflow.sla.domain.entities import PolicyScope, SLAPolicy

SECONDS_PER_HOUR = 3600.0

# breached > due_soon > on_track; a stopped clock counts as on_track
_SEVERITY = {
    SLAState.MET: 0,
    SLAState.ON_TRACK: 0,
    SLAState.DUE_SOON: 1,
    SLAState.BREACHED: 2,
}

_STATUS_FOR = {
    (SLADimension.RESPONSE, SLAState.DUE_SOON): SLAStatus.RESPONSE_DUE_SOON,
    (SLADimension.RESPONSE, SLAState.BREACHED): SLAStatus.RESPONSE_BREACHED,
    (SLADimension.RESOLUTION, SLAState.DUE_SOON): SLAStatus.RESOLUTION_DUE_SOON,
    (SLADimension.RESOLUTION, SLAState.BREACHED): SLAStatus.RESOLUTION_BREACHED,
}


@dataclass(frozen=True)
class DimensionEvaluation:
    """State of one SLA clock at evaluation time."""
    dimension: SLADimension
    state: SLAState
    budget_hours: float
    elapsed_hours: float
    deadline: datetime
    stopped_at: Optional[datetime] = None

    @property
    def remaining_hours(self) -> float:
        return max(0.0, self.budget_hours - self.elapsed_hours)

    @property
    def is_running(self) -> bool:
        return self.stopped_at is None


@dataclass(frozen=True)
class SLAEvaluation:
    """Both clocks of a case plus the policy they were measured against."""
    case_id: UUID
    company_id: UUID
    evaluated_at: datetime
    policy: SLAPolicy
    response: DimensionEvaluation
    resolution: DimensionEvaluation

    @property
    def status(self) -> SLAStatus:
        return SLACalculator.overall_status(self.response, self.resolution)

    @property
    def breached(self) -> List[DimensionEvaluation]:
        return [d for d in (self.response, self.resolution) if d.state == SLAState.BREACHED]

    @property
    def escalation_due(self) -> bool:
        """Response clock still running past the escalation budget."""
        budget = self.policy.escalation_time_budget
        return (
            budget is not None
            and self.response.is_running
            and self.response.elapsed_hours >= budget
        )


class SLACalculator:
    """
    Pure functions for SLA calculations.

    Stateless utility class: all SLA clock arithmetic in one place.
    """

    @staticmethod
    def evaluate_dimension(
        dimension: SLADimension,
        started_at: datetime,
        stopped_at: Optional[datetime],
        budget_hours: float,
        current_time: datetime,
        warning_ratio: float = 0.75
    ) -> DimensionEvaluation:
        """
        Evaluate one clock.

        A stopped clock is ``met``. A running clock is ``breached`` once
        elapsed reaches the budget and ``due_soon`` from ``warning_ratio`` of
        the budget onwards.
        """
        end = stopped_at if stopped_at is not None else current_time
        elapsed = max(0.0, (end - started_at).total_seconds() / SECONDS_PER_HOUR)
        deadline = started_at + timedelta(hours=budget_hours)

        if stopped_at is not None:
            state = SLAState.MET
        elif elapsed >= budget_hours:
            state = SLAState.BREACHED
        elif elapsed >= warning_ratio * budget_hours:
            state = SLAState.DUE_SOON
        else:
            state = SLAState.ON_TRACK

        return DimensionEvaluation(
            dimension=dimension,
            state=state,
            budget_hours=budget_hours,
            elapsed_hours=elapsed,
            deadline=deadline,
            stopped_at=stopped_at,
        )

    @staticmethod
    def overall_status(
        response: DimensionEvaluation,
        resolution: DimensionEvaluation
    ) -> SLAStatus:
        """The more severe clock wins; on a tie resolution is reported."""
        worst = resolution
        if _SEVERITY[response.state] > _SEVERITY[resolution.state]:
            worst = response
        return _STATUS_FOR.get((worst.dimension, worst.state), SLAStatus.ON_TRACK)

    @staticmethod
    def evaluate(
        case: Case,
        policy: SLAPolicy,
        current_time: datetime,
        warning_ratio: float = 0.75
    ) -> SLAEvaluation:
        """Evaluate both clocks of ``case``; both start at created_at."""
        response = SLACalculator.evaluate_dimension(
            SLADimension.RESPONSE,
            case.created_at,
            case.first_response_at,
            policy.response_time_budget,
            current_time,
            warning_ratio,
        )
        resolution = SLACalculator.evaluate_dimension(
            SLADimension.RESOLUTION,
            case.created_at,
            case.closed_at,
            policy.resolution_time_budget,
            current_time,
            warning_ratio,
        )
        return SLAEvaluation(
            case_id=case.id,
            company_id=case.company_id,
            evaluated_at=current_time,
            policy=policy,
            response=response,
            resolution=resolution,
        )


# ========== Global default policies (YAML) ==========

class PolicyBudget(BaseModel):
    """Budgets for one global policy entry."""
    response_time_budget: float = Field(gt=0, description="Hours until first response")
    resolution_time_budget: float = Field(gt=0, description="Hours until closure")
    escalation_time_budget: Optional[float] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def validate_order(self) -> "PolicyBudget":
        if self.resolution_time_budget < self.response_time_budget:
            raise ValueError("resolution_time_budget must be >= response_time_budget")
        return self


class SLAConfig(BaseModel):
    """
    Global default SLA policies loaded from YAML.

    ``policies`` maps case type -> priority -> budgets. ``default`` is the
    last-resort policy; without it an unmatched case has no SLA and
    evaluation fails loudly.
    """
    default: Optional[PolicyBudget] = None
    policies: Dict[CaseType, Dict[CasePriority, PolicyBudget]] = Field(default_factory=dict)

    def for_case(self, case_type: CaseType, priority: CasePriority) -> Optional[SLAPolicy]:
        budget = self.policies.get(CaseType(case_type), {}).get(CasePriority(priority))
        if budget is None:
            return None
        return SLAPolicy(
            case_type=CaseType(case_type),
            priority=CasePriority(priority),
            scope=PolicyScope.GLOBAL,
            **budget.model_dump(),
        )

    def default_policy(self) -> Optional[SLAPolicy]:
        if self.default is None:
            return None
        return SLAPolicy(scope=PolicyScope.GLOBAL_DEFAULT, **self.default.model_dump())
