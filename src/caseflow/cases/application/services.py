"""
Case Application Services
=========================

The Case Store: creation, status transitions, reassignment and reads, with
optimistic versioning on every write.

Following SOLID principles:
- Single Responsibility: CaseService owns case state, nothing else
- Dependency Inversion: repositories, the activity log and the SLA monitor
  are injected abstractions
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Union
from uuid import UUID, uuid4

from caseflow.activity.application import ActivityLog
from caseflow.activity.domain import ActivityEntry
from caseflow.cases.application.dto import CaseCreateDTO, CaseListQueryDTO
from caseflow.cases.domain import Case
from caseflow.config import ActivityType, CaseStatus
from caseflow.core import (
    ResourceNotFoundException, StaleWriteException, ValidationException
)
from caseflow.core.validation import parse_payload, require_text
from caseflow.shared.infrastructure.clock import Clock
from caseflow.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

SYSTEM_WRITE_ATTEMPTS = 3


# ========== Repository Interfaces (Dependency Inversion) ==========

class ICaseRepository(ABC):
    """Interface for case data access."""

    @abstractmethod
    async def get(self, case_id: UUID) -> Optional[Case]:
        """Get a case by id."""

    @abstractmethod
    async def add(self, case: Case) -> Case:
        """Insert a new case."""

    @abstractmethod
    async def save(self, case: Case, expected_version: int) -> Case:
        """
        Persist ``case`` only if the stored version still equals
        ``expected_version``; bumps the version. Raises StaleWriteException
        otherwise.
        """

    @abstractmethod
    async def increment_actual_hours(self, case_id: UUID, hours: float) -> None:
        """Atomically add ``hours`` to actual_hours."""

    @abstractmethod
    async def list(self, filters: dict, limit: int = 100, offset: int = 0) -> List[Case]:
        """List cases with filters, newest first."""

    @abstractmethod
    async def list_unclosed(self, limit: int, after_id: Optional[UUID] = None) -> List[Case]:
        """Page through non-closed cases ordered by id (keyset pagination)."""


class ICaseSLAMonitor(ABC):
    """Recomputes SLA status for a case after it changes."""

    @abstractmethod
    async def evaluate_case(self, case: Case) -> Any:
        """Evaluate SLA (dispatching breach alerts) and return the evaluation."""


@dataclass
class CaseTransitionResult:
    """A case after a transition together with its recomputed SLA view."""
    case: Case
    previous_status: CaseStatus
    sla: Any


# ========== Application Services ==========

class CaseService:
    """
    Service for the case lifecycle.

    Writes use the version the caller last read; a mismatch raises
    StaleWriteException and nothing is written.
    """

    def __init__(
        self,
        case_repository: ICaseRepository,
        activity_log: ActivityLog,
        clock: Clock,
        sla_monitor: Optional[ICaseSLAMonitor] = None
    ):
        self._repo = case_repository
        self._activity = activity_log
        self._clock = clock
        self._sla_monitor = sla_monitor

    async def create(self, payload: Union[CaseCreateDTO, Mapping[str, Any]]) -> Case:
        """
        Create a case. Status is always ``open`` whatever the caller sent.

        Raises:
            ValidationException: empty title/description or unknown enum value
        """
        request = parse_payload(CaseCreateDTO, payload)
        now = self._clock.now()

        case = Case(
            id=uuid4(),
            company_id=request.company_id,
            client_id=request.client_id,
            title=require_text(request.title, "title"),
            description=require_text(request.description, "description"),
            type=request.type,
            priority=request.priority,
            source=request.source,
            status=CaseStatus.OPEN,
            created_at=now,
            updated_at=now,
            due_date=request.due_date,
            estimated_hours=request.estimated_hours,
            assigned_to=request.assigned_to,
            assigned_team=request.assigned_team,
            tags={tag for tag in request.tags if tag},
            internal_notes=request.internal_notes,
            external_reference=request.external_reference,
        )
        case = await self._repo.add(case)

        await self._activity.append(ActivityEntry(
            case_id=case.id,
            activity_type=ActivityType.STATUS_CHANGE,
            content="Case opened",
            created_at=now,
            created_by=request.created_by,
            metadata={"from": None, "to": CaseStatus.OPEN.value, "source": case.source.value},
            client_visible=True,
        ))

        logger.info(
            "Case created",
            extra={
                "case_id": str(case.id),
                "company_id": str(case.company_id),
                "case_type": case.type.value,
                "priority": case.priority.value,
            }
        )
        return case

    async def get(self, case_id: UUID) -> Optional[Case]:
        return await self._repo.get(case_id)

    async def require(self, case_id: UUID) -> Case:
        case = await self._repo.get(case_id)
        if case is None:
            raise ResourceNotFoundException("Case", str(case_id))
        return case

    async def list_cases(self, query: Union[CaseListQueryDTO, Mapping[str, Any]]) -> List[Case]:
        query = parse_payload(CaseListQueryDTO, query)
        filters = query.model_dump(exclude={"limit", "offset"}, exclude_none=True)
        return await self._repo.list(filters, limit=query.limit, offset=query.offset)

    async def transition(
        self,
        case_id: UUID,
        version: int,
        new_status: CaseStatus,
        actor: Optional[str] = None
    ) -> CaseTransitionResult:
        """
        Move a case to ``new_status``.

        The SLA status is recomputed before returning so the caller sees a
        consistent post-transition view.

        Raises:
            ValidationException: unknown status
            ResourceNotFoundException: unknown case
            StaleWriteException: ``version`` is not the current version
            InvalidTransitionException: same-state or disallowed move
        """
        try:
            new_status = CaseStatus(new_status)
        except ValueError as e:
            raise ValidationException(
                f"Unknown case status: {new_status}",
                {"status": str(new_status), "allowed": [s.value for s in CaseStatus]}
            ) from e
        case = await self.require(case_id)
        self._check_version(case, version)

        now = self._clock.now()
        previous = case.transition_to(new_status, now)
        case = await self._repo.save(case, expected_version=version)

        metadata = {"from": previous.value, "to": new_status.value}
        if new_status == CaseStatus.CLOSED:
            metadata["closed_at"] = case.closed_at.isoformat()
        elif previous == CaseStatus.CLOSED:
            metadata["reopened"] = True

        await self._activity.append(ActivityEntry(
            case_id=case.id,
            activity_type=ActivityType.STATUS_CHANGE,
            content=f"Status changed from {previous.value} to {new_status.value}",
            created_at=now,
            created_by=actor,
            metadata=metadata,
            client_visible=True,
        ))

        sla = await self._sla_monitor.evaluate_case(case) if self._sla_monitor else None

        logger.info(
            "Case transitioned",
            extra={
                "case_id": str(case.id),
                "from_status": previous.value,
                "to_status": new_status.value,
                "version": case.version,
            }
        )
        return CaseTransitionResult(case=case, previous_status=previous, sla=sla)

    async def reassign(
        self,
        case_id: UUID,
        version: int,
        assignee: str,
        team: Optional[str] = None,
        actor: Optional[str] = None
    ) -> Case:
        assignee = require_text(assignee, "assigned_to")
        case = await self.require(case_id)
        self._check_version(case, version)

        now = self._clock.now()
        previous = case.reassign(assignee, now, team=team)
        case = await self._repo.save(case, expected_version=version)

        await self._activity.append(ActivityEntry(
            case_id=case.id,
            activity_type=ActivityType.ASSIGNMENT_CHANGE,
            content=f"Assigned to {assignee}",
            created_at=now,
            created_by=actor,
            metadata={"from": previous, "to": assignee, "team": team},
        ))

        logger.info(
            "Case reassigned",
            extra={"case_id": str(case.id), "assigned_to": assignee, "version": case.version}
        )
        return case

    async def mark_responded(self, case_id: UUID, actor: Optional[str] = None) -> CaseTransitionResult:
        """Explicit "responded" marker: stops the response clock."""
        now = self._clock.now()

        async def mutate(case: Case) -> bool:
            return case.mark_responded(now)

        case, changed = await self._write_with_retry(case_id, mutate)
        if changed:
            await self._activity.append(ActivityEntry(
                case_id=case.id,
                activity_type=ActivityType.NOTE,
                content="First response recorded",
                created_at=now,
                created_by=actor,
                metadata={"event": "responded"},
            ))
        sla = await self._sla_monitor.evaluate_case(case) if self._sla_monitor else None
        return CaseTransitionResult(case=case, previous_status=case.status, sla=sla)

    async def set_client_viewable(self, case_id: UUID, viewable: bool) -> Case:
        """Toggle visibility and client_viewable together in one write."""
        now = self._clock.now()

        async def mutate(case: Case) -> bool:
            if case.client_viewable == viewable:
                return False
            case.set_client_viewable(viewable, now)
            return True

        case, _ = await self._write_with_retry(case_id, mutate)
        return case

    async def add_note(
        self,
        case_id: UUID,
        content: str,
        created_by: Optional[str] = None,
        client_visible: bool = False
    ) -> ActivityEntry:
        case = await self.require(case_id)
        return await self._activity.append(ActivityEntry(
            case_id=case.id,
            activity_type=ActivityType.NOTE,
            content=require_text(content, "content"),
            created_at=self._clock.now(),
            created_by=created_by,
            client_visible=client_visible,
        ))

    async def list_activities(self, case_id: UUID, include_internal: bool = True) -> List[ActivityEntry]:
        await self.require(case_id)
        return await self._activity.list_for_case(case_id, include_internal=include_internal)

    @staticmethod
    def _check_version(case: Case, version: int) -> None:
        if case.version != version:
            raise StaleWriteException("Case", case.id, version)

    async def _write_with_retry(
        self,
        case_id: UUID,
        mutate: Callable[[Case], Awaitable[bool]]
    ) -> tuple[Case, bool]:
        """
        Read-modify-write for system-initiated changes that carry no caller
        version: re-read and retry on conflict.
        """
        for attempt in range(SYSTEM_WRITE_ATTEMPTS):
            case = await self.require(case_id)
            version = case.version
            if not await mutate(case):
                return case, False
            try:
                return await self._repo.save(case, expected_version=version), True
            except StaleWriteException:
                logger.warning(
                    "Concurrent case write, retrying",
                    extra={"case_id": str(case_id), "attempt": attempt + 1}
                )
        raise StaleWriteException("Case", case_id, version)
