"""
Retainer Value Objects
======================
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from caseflow.alerts.domain import Alert
from caseflow.retainer.domain.entities import Retainer, ServiceLogEntry


class UsageCalculator:
    """Threshold arithmetic for ledger mutations."""

    @staticmethod
    def crossed_thresholds(
        hours_before: float,
        hours_after: float,
        effective_available: float,
        thresholds: Sequence[int]
    ) -> List[int]:
        """Utilization thresholds (percent) passed by moving from before to after."""
        crossed = []
        for threshold in thresholds:
            limit = effective_available * threshold / 100
            if limit > 0 and hours_before < limit <= hours_after:
                crossed.append(threshold)
        return crossed

    @staticmethod
    def crossed_into_overage(hours_before: float, hours_after: float, effective_available: float) -> bool:
        """True when overage goes from zero to positive."""
        return hours_before <= effective_available < hours_after


@dataclass(frozen=True)
class LedgerResult:
    """Outcome of posting a service entry."""
    entry: ServiceLogEntry
    retainer: Optional[Retainer]
    consumed_hours: float
    alerts: List[Alert] = field(default_factory=list)


@dataclass(frozen=True)
class WaiveResult:
    entry: ServiceLogEntry
    retainer: Optional[Retainer]
    released_hours: float


@dataclass(frozen=True)
class RolloverResult:
    company_id: UUID
    period_start: date
    carried_hours: float
    applied: bool
    retainer: Retainer


@dataclass(frozen=True)
class UsageSummary:
    """Monthly service report for one company."""
    retainer: Retainer
    entry_count: int
    total_hours_logged: float
    billable_hours: float
    non_billable_hours: float
    waived_hours: float
    hours_by_source: Dict[str, float]
    hours_by_service_type: Dict[str, float]

    @classmethod
    def build(cls, retainer: Retainer, entries: List[ServiceLogEntry]) -> "UsageSummary":
        billable = non_billable = waived = 0.0
        by_source = {"case": 0.0, "general": 0.0}
        by_type: Dict[str, float] = {}

        for entry in entries:
            if entry.billable:
                billable += entry.hours_logged
            elif entry.is_waived:
                waived += entry.hours_logged
            else:
                non_billable += entry.hours_logged

            by_source["case" if entry.case_id else "general"] += entry.hours_logged
            key = entry.service_type or "unspecified"
            by_type[key] = by_type.get(key, 0.0) + entry.hours_logged

        return cls(
            retainer=retainer,
            entry_count=len(entries),
            total_hours_logged=billable + non_billable + waived,
            billable_hours=billable,
            non_billable_hours=non_billable,
            waived_hours=waived,
            hours_by_source=by_source,
            hours_by_service_type=by_type,
        )
