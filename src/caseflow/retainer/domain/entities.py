"""
Retainer Domain Entities
========================

Pure Python domain entities for retainers and service-log entries.

Billing periods are calendar months identified by their first day.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from caseflow.core import InvalidStateException


def billing_period_start(day: date) -> date:
    """First day of the month containing ``day``."""
    if isinstance(day, datetime):
        day = day.date()
    return day.replace(day=1)


def next_period_start(period_start: date) -> date:
    period_start = billing_period_start(period_start)
    if period_start.month == 12:
        return period_start.replace(year=period_start.year + 1, month=1)
    return period_start.replace(month=period_start.month + 1)


def previous_period_start(period_start: date) -> date:
    period_start = billing_period_start(period_start)
    if period_start.month == 1:
        return period_start.replace(year=period_start.year - 1, month=12)
    return period_start.replace(month=period_start.month - 1)


@dataclass
class Retainer:
    """
    A company's prepaid block of hours for one billing period.

    ``hours_used`` is only ever changed through the ledger's atomic
    increment/decrement; this entity derives everything else from it.
    """

    company_id: UUID
    period_start: date
    retainer_hours: float

    overage_rate: float = 0.0
    rollover_bank: float = 0.0
    hours_used: float = 0.0
    max_rollover_hours: float = 0.0
    tier_name: Optional[str] = None
    is_active: bool = True

    # Set once the carry from the previous period has been applied
    rollover_applied_at: Optional[datetime] = None

    id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate retainer invariants on initialization."""
        if self.period_start.day != 1:
            raise ValueError("period_start must be the first day of a month")

        for name in ("retainer_hours", "overage_rate", "rollover_bank", "hours_used", "max_rollover_hours"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")

    @property
    def effective_available(self) -> float:
        return self.retainer_hours + self.rollover_bank

    @property
    def overage_hours(self) -> float:
        return max(0.0, self.hours_used - self.effective_available)

    @property
    def remaining_hours(self) -> float:
        return max(0.0, self.effective_available - self.hours_used)

    @property
    def overage_charge(self) -> float:
        return round(self.overage_hours * self.overage_rate, 2)

    @property
    def utilization_percent(self) -> float:
        if self.effective_available == 0:
            return 0.0 if self.hours_used == 0 else 100.0
        return round(self.hours_used / self.effective_available * 100, 2)

    def carry_forward(self) -> float:
        """Hours this period hands to the next one."""
        return min(self.max_rollover_hours, max(0.0, self.effective_available - self.hours_used))


@dataclass
class ServiceLogEntry:
    """
    Hours a consultant logged against a company, optionally linked to a case.

    The only field that changes after posting is ``billable`` (via waive).
    """

    company_id: UUID
    hours_logged: float
    service_date: date
    description: str
    created_at: datetime

    case_id: Optional[UUID] = None
    consultant_id: Optional[str] = None
    service_type: Optional[str] = None
    notes: Optional[str] = None
    billable: bool = True
    # Hours actually taken from the retainer when posted
    consumed_hours: float = 0.0

    # Waiver
    waived_at: Optional[datetime] = None
    waive_reason: Optional[str] = None
    waived_by: Optional[str] = None

    id: Optional[UUID] = None

    def __post_init__(self):
        if self.hours_logged <= 0:
            raise ValueError("hours_logged must be positive")

    @property
    def period_start(self) -> date:
        return billing_period_start(self.service_date)

    @property
    def is_waived(self) -> bool:
        return self.waived_at is not None

    def waive(self, reason: str, timestamp: datetime, actor: Optional[str] = None) -> None:
        if not self.billable:
            raise InvalidStateException(
                f"Service entry {self.id} is not billable",
                {"entry_id": str(self.id), "waived": self.is_waived}
            )
        self.billable = False
        self.waived_at = timestamp
        self.waive_reason = reason
        self.waived_by = actor
