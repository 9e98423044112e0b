"""
SLA Domain Entities
===================

Pure Python domain entities for SLA policies.

Following Domain-Driven Design principles, entities have identity and
encapsulate business logic.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from caseflow.config import CasePriority, CaseType


class PolicyScope:
    """Where a resolved policy came from, most specific first."""
    COMPANY = "company"
    COMPANY_DEFAULT = "company_default"
    GLOBAL = "global"
    GLOBAL_DEFAULT = "global_default"


@dataclass(frozen=True)
class SLAPolicy:
    """
    Time budgets (hours) for a (case_type, priority) pair.

    ``case_type``/``priority`` of None mark a default policy. ``company_id``
    of None marks a global policy.
    """

    response_time_budget: float
    resolution_time_budget: float
    escalation_time_budget: Optional[float] = None

    case_type: Optional[CaseType] = None
    priority: Optional[CasePriority] = None
    company_id: Optional[UUID] = None
    scope: str = PolicyScope.GLOBAL_DEFAULT
    is_active: bool = True

    id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate policy invariants on initialization."""
        if self.response_time_budget <= 0 or self.resolution_time_budget <= 0:
            raise ValueError("SLA budgets must be positive")

        if self.resolution_time_budget < self.response_time_budget:
            raise ValueError("resolution_time_budget must be >= response_time_budget")

        if self.escalation_time_budget is not None and self.escalation_time_budget <= 0:
            raise ValueError("escalation_time_budget must be positive")

        if (self.case_type is None) != (self.priority is None):
            raise ValueError("case_type and priority must both be set or both be empty")

    @property
    def is_default(self) -> bool:
        return self.case_type is None
