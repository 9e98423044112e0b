"""
SLA Domain Layer
================

Contains:
- Entities: SLAPolicy
- Value Objects: SLAEvaluation, DimensionEvaluation, SLAConfig
- Calculator: SLACalculator (pure clock arithmetic)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from caseflow.sla.domain.entities import PolicyScope, SLAPolicy
from caseflow.sla.domain.value_objects import (
    DimensionEvaluation,
    PolicyBudget,
    SLACalculator,
    SLAConfig,
    SLAEvaluation,
)

__all__ = [
    # Entities
    "PolicyScope",
    "SLAPolicy",
    # Value Objects
    "DimensionEvaluation",
    "PolicyBudget",
    "SLAConfig",
    "SLAEvaluation",
    # Calculator
    "SLACalculator",
]
