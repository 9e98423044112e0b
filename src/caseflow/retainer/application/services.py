"""
Retainer Application Services
=============================

The Retainer Ledger. All mutations of ``hours_used`` are single SQL
increments/decrements, so concurrent postings for one company-period never
lose updates; the ledger and the case ``actual_hours`` change in the same
transaction.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, List, Mapping, Optional, Sequence, Union
from uuid import UUID, uuid4

from caseflow.alerts.application import AlertDispatcher
from caseflow.alerts.domain import (
    Alert, AlertSeverity, retainer_overage_key, retainer_threshold_key
)
from caseflow.cases.application import ICaseRepository
from caseflow.config import AlertType, settings
from caseflow.core import (
    InvalidStateException, ResourceNotFoundException, ValidationException
)
from caseflow.core.validation import parse_payload
from caseflow.retainer.application.dto import (
    RetainerConfigureDTO, ServiceEntryCreateDTO, WaiveDTO
)
from caseflow.retainer.domain import (
    LedgerResult,
    Retainer,
    RolloverResult,
    ServiceLogEntry,
    UsageCalculator,
    UsageSummary,
    WaiveResult,
    billing_period_start,
    previous_period_start,
)
from caseflow.shared.infrastructure.clock import Clock
from caseflow.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class IRetainerRepository(ABC):
    """Interface for retainer period storage."""

    @abstractmethod
    async def get(self, company_id: UUID, period_start: date) -> Optional[Retainer]:
        """Get the retainer for a company period."""

    @abstractmethod
    async def save(self, retainer: Retainer) -> Retainer:
        """Insert or update the contract fields of a period (never hours_used)."""

    @abstractmethod
    async def add_hours(self, retainer_id: UUID, hours: float) -> Retainer:
        """Atomically add ``hours`` to hours_used and return the updated row."""

    @abstractmethod
    async def release_hours(self, retainer_id: UUID, hours: float) -> Retainer:
        """Atomically subtract ``hours`` from hours_used, floored at zero."""

    @abstractmethod
    async def create_if_absent(self, retainer: Retainer) -> bool:
        """Insert the period row unless one exists. Returns True if inserted."""

    @abstractmethod
    async def apply_rollover(
        self,
        company_id: UUID,
        period_start: date,
        carry: float,
        applied_at: datetime
    ) -> bool:
        """
        Set rollover_bank once per period. Returns False when the marker was
        already set.
        """

    @abstractmethod
    async def list_active(self, period_start: date) -> List[Retainer]:
        """Active retainers of a period."""


class IServiceLogRepository(ABC):
    """Interface for service-log storage."""

    @abstractmethod
    async def add(self, entry: ServiceLogEntry) -> ServiceLogEntry:
        """Insert an entry."""

    @abstractmethod
    async def get(self, entry_id: UUID) -> Optional[ServiceLogEntry]:
        """Get an entry by id."""

    @abstractmethod
    async def mark_waived(self, entry: ServiceLogEntry) -> bool:
        """
        Persist the waiver only if the stored entry is still billable.
        Returns False if another writer waived it first.
        """

    @abstractmethod
    async def list_for_period(self, company_id: UUID, period_start: date) -> List[ServiceLogEntry]:
        """Entries whose service_date falls in the period."""


# ========== Application Services ==========

class RetainerLedger:
    """
    Service for retainer consumption, waivers and rollover.

    Depends on the case repository only to bump ``actual_hours``.
    """

    def __init__(
        self,
        retainer_repository: IRetainerRepository,
        service_log_repository: IServiceLogRepository,
        case_repository: ICaseRepository,
        dispatcher: AlertDispatcher,
        clock: Clock,
        warning_thresholds: Optional[Sequence[int]] = None
    ):
        self._retainers = retainer_repository
        self._service_log = service_log_repository
        self._cases = case_repository
        self._dispatcher = dispatcher
        self._clock = clock
        self._thresholds = sorted(
            warning_thresholds if warning_thresholds is not None else settings.retainer_warning_thresholds
        )

    # ----- configuration -----

    async def configure(self, payload: Union[RetainerConfigureDTO, Mapping[str, Any]]) -> Retainer:
        """Create or update a company's retainer for a period."""
        request = parse_payload(RetainerConfigureDTO, payload)
        period = billing_period_start(request.period)
        now = self._clock.now()
        max_rollover = (
            request.max_rollover_hours
            if request.max_rollover_hours is not None
            else settings.retainer_default_max_rollover_hours
        )

        existing = await self._retainers.get(request.company_id, period)
        if existing:
            existing.retainer_hours = request.retainer_hours
            existing.overage_rate = request.overage_rate
            existing.max_rollover_hours = max_rollover
            existing.tier_name = request.tier_name
            existing.is_active = request.is_active
            existing.updated_at = now
            retainer = await self._retainers.save(existing)
        else:
            retainer = await self._retainers.save(Retainer(
                id=uuid4(),
                company_id=request.company_id,
                period_start=period,
                retainer_hours=request.retainer_hours,
                overage_rate=request.overage_rate,
                rollover_bank=request.rollover_bank,
                # An explicit bank stands in for rollover into this period
                rollover_applied_at=now if "rollover_bank" in request.model_fields_set else None,
                max_rollover_hours=max_rollover,
                tier_name=request.tier_name,
                is_active=request.is_active,
                created_at=now,
                updated_at=now,
            ))

        logger.info(
            "Retainer configured",
            extra={
                "company_id": str(retainer.company_id),
                "period_start": retainer.period_start.isoformat(),
                "retainer_hours": retainer.retainer_hours,
                "created": existing is None,
            }
        )
        return retainer

    async def get_retainer(self, company_id: UUID, period: date) -> Retainer:
        period = billing_period_start(period)
        retainer = await self._retainers.get(company_id, period)
        if retainer is None:
            raise ResourceNotFoundException("Retainer", f"{company_id}:{period.isoformat()}")
        return retainer

    # ----- consumption -----

    async def post_service_entry(self, payload: Union[ServiceEntryCreateDTO, Mapping[str, Any]]) -> LedgerResult:
        """
        Record a service-log entry and consume retainer hours.

        Billable hours are added to the period's ``hours_used`` and, for
        case-linked entries, to the case's ``actual_hours`` in the same
        transaction. A period with no row yet is opened by rolling over an
        active previous period. A period without an active retainer records
        the entry without consuming anything; ``consumed_hours`` on the entry
        records what was taken.

        Raises:
            ValidationException: hours_logged <= 0, empty description, or a
                case that belongs to another company
            ResourceNotFoundException: unknown case
        """
        request = parse_payload(ServiceEntryCreateDTO, payload)

        if request.case_id is not None:
            case = await self._cases.get(request.case_id)
            if case is None:
                raise ResourceNotFoundException("Case", str(request.case_id))
            if case.company_id != request.company_id:
                raise ValidationException(
                    "Case belongs to a different company",
                    {"case_id": str(case.id), "company_id": str(request.company_id)}
                )

        entry = ServiceLogEntry(
            id=uuid4(),
            company_id=request.company_id,
            case_id=request.case_id,
            consultant_id=request.consultant_id,
            hours_logged=request.hours_logged,
            billable=request.billable,
            service_date=request.service_date,
            description=request.description,
            service_type=request.service_type,
            notes=request.notes,
            created_at=self._clock.now(),
        )

        retainer = None
        alerts: List[Alert] = []

        if entry.billable:
            retainer = await self._open_period(entry.company_id, entry.period_start)
            if retainer is not None and retainer.is_active:
                retainer = await self._retainers.add_hours(retainer.id, entry.hours_logged)
                entry.consumed_hours = entry.hours_logged
            else:
                logger.warning(
                    "No active retainer for period, hours not consumed",
                    extra={
                        "company_id": str(entry.company_id),
                        "period_start": entry.period_start.isoformat(),
                        "entry_id": str(entry.id),
                    }
                )

        entry = await self._service_log.add(entry)
        consumed = entry.consumed_hours

        if consumed:
            alerts = await self._raise_usage_alerts(retainer, retainer.hours_used - consumed, entry)
        if entry.billable and entry.case_id is not None:
            await self._cases.increment_actual_hours(entry.case_id, entry.hours_logged)

        logger.info(
            "Service entry posted",
            extra={
                "entry_id": str(entry.id),
                "company_id": str(entry.company_id),
                "case_id": str(entry.case_id) if entry.case_id else None,
                "hours_logged": entry.hours_logged,
                "billable": entry.billable,
                "consumed_hours": consumed,
            }
        )
        return LedgerResult(entry=entry, retainer=retainer, consumed_hours=consumed, alerts=alerts)

    async def _open_period(self, company_id: UUID, period: date) -> Optional[Retainer]:
        """
        Period row for a posting. A period not yet rolled into is opened from
        an active previous period, so early postings in a new month count.
        """
        retainer = await self._retainers.get(company_id, period)
        if retainer is not None:
            return retainer

        previous = await self._retainers.get(company_id, previous_period_start(period))
        if previous is None or not previous.is_active:
            return None

        logger.info(
            "Opening retainer period on first posting",
            extra={"company_id": str(company_id), "period_start": period.isoformat()}
        )
        return (await self.rollover_period(company_id, period)).retainer

    async def _raise_usage_alerts(
        self,
        retainer: Retainer,
        hours_before: float,
        entry: ServiceLogEntry
    ) -> List[Alert]:
        raised = []
        effective = retainer.effective_available
        now = self._clock.now()

        for threshold in UsageCalculator.crossed_thresholds(
            hours_before, retainer.hours_used, effective, self._thresholds
        ):
            alert = await self._dispatcher.dispatch(Alert(
                alert_type=AlertType.RETAINER_THRESHOLD,
                dedup_key=retainer_threshold_key(retainer.company_id, retainer.period_start, threshold),
                company_id=retainer.company_id,
                case_id=entry.case_id,
                severity=AlertSeverity.WARNING,
                message=(
                    f"Retainer usage passed {threshold}% for {retainer.period_start:%B %Y} "
                    f"({retainer.hours_used:g} of {effective:g}h)"
                ),
                created_at=now,
                payload={
                    "threshold": threshold,
                    "period_start": retainer.period_start.isoformat(),
                    "hours_used": retainer.hours_used,
                    "effective_available": effective,
                    "utilization_percent": retainer.utilization_percent,
                    "entry_id": str(entry.id),
                },
            ))
            if alert:
                raised.append(alert)

        if UsageCalculator.crossed_into_overage(hours_before, retainer.hours_used, effective):
            alert = await self._dispatcher.dispatch(Alert(
                alert_type=AlertType.RETAINER_OVERAGE,
                dedup_key=retainer_overage_key(retainer.company_id, retainer.period_start),
                company_id=retainer.company_id,
                case_id=entry.case_id,
                severity=AlertSeverity.CRITICAL,
                message=(
                    f"Retainer exceeded for {retainer.period_start:%B %Y}: "
                    f"{retainer.overage_hours:g}h overage"
                ),
                created_at=now,
                payload={
                    "period_start": retainer.period_start.isoformat(),
                    "hours_used": retainer.hours_used,
                    "effective_available": effective,
                    "overage_hours": retainer.overage_hours,
                    "overage_rate": retainer.overage_rate,
                    "entry_id": str(entry.id),
                },
            ))
            if alert:
                raised.append(alert)

        return raised

    # ----- waiver -----

    async def waive(
        self,
        entry_id: UUID,
        reason: Union[str, WaiveDTO, Mapping[str, Any]],
        actor: Optional[str] = None
    ) -> WaiveResult:
        """
        Make a billable entry non-billable and give back the hours it consumed.

        Case ``actual_hours`` is left alone: it records work performed,
        whatever was billed.

        Raises:
            ValidationException: empty reason
            ResourceNotFoundException: unknown entry
            InvalidStateException: entry already non-billable
        """
        if isinstance(reason, str) or reason is None:
            reason = {"reason": reason or "", "actor": actor}
        request = parse_payload(WaiveDTO, reason)

        entry = await self._service_log.get(entry_id)
        if entry is None:
            raise ResourceNotFoundException("ServiceLogEntry", str(entry_id))

        entry.waive(request.reason, self._clock.now(), request.actor)
        if not await self._service_log.mark_waived(entry):
            raise InvalidStateException(
                f"Service entry {entry_id} is not billable",
                {"entry_id": str(entry_id)}
            )

        retainer = await self._retainers.get(entry.company_id, entry.period_start)
        released = 0.0
        if retainer is not None and entry.consumed_hours > 0:
            before = retainer.hours_used
            retainer = await self._retainers.release_hours(retainer.id, entry.consumed_hours)
            released = before - retainer.hours_used

        logger.info(
            "Service entry waived",
            extra={
                "entry_id": str(entry.id),
                "company_id": str(entry.company_id),
                "hours_logged": entry.hours_logged,
                "released_hours": released,
                "waived_by": request.actor,
            }
        )
        return WaiveResult(entry=entry, retainer=retainer, released_hours=released)

    # ----- rollover -----

    async def rollover_period(self, company_id: UUID, new_period_start: date) -> RolloverResult:
        """
        Open ``new_period_start`` for a company, carrying unused hours.

        carry = min(max_rollover, max(0, effective_available - hours_used))
        of the previous period. Applying twice is a no-op.

        Raises:
            ResourceNotFoundException: no retainer in the previous period
        """
        period = billing_period_start(new_period_start)
        previous = await self._retainers.get(company_id, previous_period_start(period))
        if previous is None:
            raise ResourceNotFoundException(
                "Retainer", f"{company_id}:{previous_period_start(period).isoformat()}"
            )

        now = self._clock.now()
        carry = previous.carry_forward() if previous.is_active else 0.0

        await self._retainers.create_if_absent(Retainer(
            id=uuid4(),
            company_id=company_id,
            period_start=period,
            retainer_hours=previous.retainer_hours,
            overage_rate=previous.overage_rate,
            max_rollover_hours=previous.max_rollover_hours,
            tier_name=previous.tier_name,
            is_active=previous.is_active,
            rollover_bank=0.0,
            hours_used=0.0,
            created_at=now,
            updated_at=now,
        ))
        applied = await self._retainers.apply_rollover(company_id, period, carry, now)
        retainer = await self._retainers.get(company_id, period)

        if applied:
            logger.info(
                "Retainer rolled over",
                extra={
                    "company_id": str(company_id),
                    "period_start": period.isoformat(),
                    "carried_hours": carry,
                    "previous_hours_used": previous.hours_used,
                }
            )
        else:
            logger.info(
                "Rollover already applied",
                extra={"company_id": str(company_id), "period_start": period.isoformat()}
            )

        return RolloverResult(
            company_id=company_id,
            period_start=period,
            carried_hours=carry if applied else retainer.rollover_bank,
            applied=applied,
            retainer=retainer,
        )

    async def rollover_all(self, new_period_start: date) -> List[RolloverResult]:
        """Roll every active retainer of the previous period into ``new_period_start``."""
        period = billing_period_start(new_period_start)
        results = []
        for previous in await self._retainers.list_active(previous_period_start(period)):
            results.append(await self.rollover_period(previous.company_id, period))

        logger.info(
            "Monthly rollover completed",
            extra={
                "period_start": period.isoformat(),
                "companies": len(results),
                "applied": sum(1 for r in results if r.applied),
            }
        )
        return results

    # ----- reporting -----

    async def usage_summary(self, company_id: UUID, period: date) -> UsageSummary:
        retainer = await self.get_retainer(company_id, period)
        entries = await self._service_log.list_for_period(company_id, retainer.period_start)
        return UsageSummary.build(retainer, entries)
