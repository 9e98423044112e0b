"""
Retainer Domain Layer
=====================

Contains:
- Entities: Retainer, ServiceLogEntry
- Value Objects: LedgerResult, WaiveResult, RolloverResult, UsageSummary
- Billing period helpers

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from caseflow.retainer.domain.entities import (
    Retainer,
    ServiceLogEntry,
    billing_period_start,
    next_period_start,
    previous_period_start,
)
from caseflow.retainer.domain.value_objects import (
    LedgerResult,
    RolloverResult,
    UsageCalculator,
    UsageSummary,
    WaiveResult,
)

__all__ = [
    # Entities
    "Retainer",
    "ServiceLogEntry",
    # Value Objects
    "LedgerResult",
    "RolloverResult",
    "UsageCalculator",
    "UsageSummary",
    "WaiveResult",
    # Periods
    "billing_period_start",
    "next_period_start",
    "previous_period_start",
]
