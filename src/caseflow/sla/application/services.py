"""
SLA Application Services
========================

Application services orchestrate business logic and coordinate between
domain entities and repositories.

Following SOLID principles:
- Single Responsibility: resolver, monitor, sweep and queries are separate
- Dependency Inversion: depend on abstractions (repositories, config
  provider), not concrete implementations
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union
from uuid import UUID, uuid4

from caseflow.alerts.application import AlertDispatcher
from caseflow.alerts.domain import Alert, AlertSeverity, sla_breach_key, sla_escalation_key
from caseflow.cases.application import ICaseRepository, ICaseSLAMonitor
from caseflow.cases.domain import Case
from caseflow.config import (
    OPEN_STATUSES, AlertType, CasePriority, CaseType, SLAStatus, settings
)
from caseflow.core import NoPolicyDefinedException, ResourceNotFoundException
from caseflow.core.validation import parse_payload
from caseflow.shared.infrastructure.clock import Clock
from caseflow.shared.infrastructure.logging import get_logger, log_latency
from caseflow.sla.application.dto import PolicyCreateDTO
from caseflow.sla.domain import PolicyScope, SLACalculator, SLAConfig, SLAEvaluation, SLAPolicy

logger = get_logger(__name__)


# ========== Repository Interfaces (Dependency Inversion) ==========

class ISLAPolicyRepository(ABC):
    """Interface for company-specific SLA policy storage."""

    @abstractmethod
    async def find(
        self,
        company_id: UUID,
        case_type: Optional[CaseType],
        priority: Optional[CasePriority],
        active_only: bool = True
    ) -> Optional[SLAPolicy]:
        """Exact match; None/None finds the company default."""

    @abstractmethod
    async def save(self, policy: SLAPolicy) -> SLAPolicy:
        """Insert or replace the policy for its (company, type, priority) key."""

    @abstractmethod
    async def list(self, company_id: Optional[UUID] = None) -> List[SLAPolicy]:
        """List company policies."""


class ISLAConfigProvider(ABC):
    """Interface for global SLA configuration access."""

    @abstractmethod
    def get_config(self) -> SLAConfig:
        """Get current SLA configuration."""


# ========== Application Services ==========

class SLAPolicyResolver:
    """
    Finds the policy that applies to a case.

    Lookup order: company (type, priority) -> company default ->
    global (type, priority) -> global default. Falling off the end raises
    NoPolicyDefinedException; a case is never silently SLA-exempt.
    """

    def __init__(self, policy_repository: ISLAPolicyRepository, config_provider: ISLAConfigProvider):
        self._policy_repo = policy_repository
        self._config_provider = config_provider

    async def resolve(self, company_id: UUID, case_type: CaseType, priority: CasePriority) -> SLAPolicy:
        policy = await self._policy_repo.find(company_id, case_type, priority)
        if policy is not None:
            return policy

        policy = await self._policy_repo.find(company_id, None, None)
        if policy is not None:
            return policy

        config = self._config_provider.get_config()
        policy = config.for_case(case_type, priority) or config.default_policy()
        if policy is not None:
            return policy

        logger.error(
            "No SLA policy defined",
            extra={
                "company_id": str(company_id),
                "case_type": CaseType(case_type).value,
                "priority": CasePriority(priority).value,
            }
        )
        raise NoPolicyDefinedException(company_id, CaseType(case_type).value, CasePriority(priority).value)


class SLAMonitor(ICaseSLAMonitor):
    """
    SLA Evaluator bound to alert dispatch.

    ``evaluate_case`` recomputes the status and dispatches one alert per
    breached dimension (and one escalation alert); dedup keys make repeated
    evaluation of an already-breached case silent.
    """

    def __init__(
        self,
        resolver: SLAPolicyResolver,
        dispatcher: AlertDispatcher,
        clock: Clock,
        warning_ratio: Optional[float] = None
    ):
        self._resolver = resolver
        self._dispatcher = dispatcher
        self._clock = clock
        self._warning_ratio = warning_ratio if warning_ratio is not None else settings.sla_warning_ratio

    async def evaluate(self, case: Case) -> SLAEvaluation:
        """Pure evaluation, no alerts."""
        policy = await self._resolver.resolve(case.company_id, case.type, case.priority)
        return SLACalculator.evaluate(case, policy, self._clock.now(), self._warning_ratio)

    async def evaluate_case(self, case: Case) -> SLAEvaluation:
        evaluation = await self.evaluate(case)
        await self._raise_alerts(case, evaluation)
        return evaluation

    async def _raise_alerts(self, case: Case, evaluation: SLAEvaluation) -> List[Alert]:
        raised = []
        for dimension in evaluation.breached:
            alert = await self._dispatcher.dispatch(Alert(
                alert_type=AlertType.SLA_BREACH,
                dedup_key=sla_breach_key(case.id, dimension.dimension),
                company_id=case.company_id,
                case_id=case.id,
                severity=AlertSeverity.CRITICAL,
                message=(
                    f"Case '{case.title}' breached its {dimension.dimension.value} SLA "
                    f"({dimension.budget_hours:g}h budget)"
                ),
                created_at=evaluation.evaluated_at,
                payload={
                    "dimension": dimension.dimension.value,
                    "budget_hours": dimension.budget_hours,
                    "elapsed_hours": round(dimension.elapsed_hours, 2),
                    "deadline": dimension.deadline.isoformat(),
                    "priority": case.priority.value,
                    "case_type": case.type.value,
                    "policy_scope": evaluation.policy.scope,
                },
            ))
            if alert:
                raised.append(alert)

        if evaluation.escalation_due:
            alert = await self._dispatcher.dispatch(Alert(
                alert_type=AlertType.SLA_ESCALATION,
                dedup_key=sla_escalation_key(case.id),
                company_id=case.company_id,
                case_id=case.id,
                severity=AlertSeverity.WARNING,
                message=(
                    f"Case '{case.title}' has had no response for "
                    f"{evaluation.response.elapsed_hours:.1f}h and needs escalation"
                ),
                created_at=evaluation.evaluated_at,
                payload={
                    "dimension": evaluation.response.dimension.value,
                    "escalation_hours": evaluation.policy.escalation_time_budget,
                    "elapsed_hours": round(evaluation.response.elapsed_hours, 2),
                    "assigned_to": case.assigned_to,
                },
            ))
            if alert:
                raised.append(alert)

        return raised


@dataclass
class SweepResult:
    """Counters from one sweep run."""
    evaluated: int = 0
    alerts_raised: int = 0
    missing_policy: int = 0
    redelivered: int = 0
    status_counts: Dict[str, int] = field(default_factory=dict)


class SLASweepService:
    """
    Periodic scan of non-closed cases.

    The only source of alerts not triggered by a request: a case nobody
    touches must still breach on schedule. Safe to run from several
    instances at once because alert inserts are deduplicated.
    """

    def __init__(
        self,
        case_repository: ICaseRepository,
        monitor: SLAMonitor,
        dispatcher: AlertDispatcher,
        batch_size: Optional[int] = None
    ):
        self._case_repo = case_repository
        self._monitor = monitor
        self._dispatcher = dispatcher
        self._batch_size = batch_size or settings.sla_sweep_batch_size

    async def run(self) -> SweepResult:
        result = SweepResult()

        with log_latency(logger, "sla_sweep"):
            result.redelivered = await self._dispatcher.deliver_pending()
            queued_before = len(self._dispatcher.queued)

            after_id = None
            while True:
                cases = await self._case_repo.list_unclosed(self._batch_size, after_id=after_id)
                if not cases:
                    break

                for case in cases:
                    try:
                        evaluation = await self._monitor.evaluate_case(case)
                    except NoPolicyDefinedException:
                        result.missing_policy += 1
                        continue
                    result.evaluated += 1
                    status = evaluation.status.value
                    result.status_counts[status] = result.status_counts.get(status, 0) + 1

                after_id = cases[-1].id
                if len(cases) < self._batch_size:
                    break

            result.alerts_raised = len(self._dispatcher.queued) - queued_before

        logger.info(
            "SLA sweep completed",
            extra={
                "evaluated": result.evaluated,
                "alerts_raised": result.alerts_raised,
                "missing_policy": result.missing_policy,
                "redelivered": result.redelivered,
            }
        )
        return result


@dataclass
class DashboardSummary:
    """Per-company SLA counts over open cases."""
    company_id: Optional[UUID]
    total_open: int = 0
    status_counts: Dict[SLAStatus, int] = field(default_factory=lambda: {s: 0 for s in SLAStatus})
    missing_policy: int = 0

    @property
    def breached_count(self) -> int:
        return (
            self.status_counts[SLAStatus.RESPONSE_BREACHED]
            + self.status_counts[SLAStatus.RESOLUTION_BREACHED]
        )

    @property
    def breach_rate(self) -> float:
        evaluated = self.total_open - self.missing_policy
        return round(self.breached_count / evaluated * 100, 2) if evaluated else 0.0


class SLAService:
    """
    Read-side SLA operations: per-case status and the company dashboard.

    Reads go through the monitor, so a breach first noticed on read still
    raises its alert.
    """

    DASHBOARD_PAGE_SIZE = 500

    def __init__(self, case_repository: ICaseRepository, monitor: SLAMonitor):
        self._case_repo = case_repository
        self._monitor = monitor

    async def case_status(self, case_id: UUID) -> tuple[Case, SLAEvaluation]:
        case = await self._case_repo.get(case_id)
        if case is None:
            raise ResourceNotFoundException("Case", str(case_id))
        return case, await self._monitor.evaluate_case(case)

    async def dashboard(self, company_id: Optional[UUID] = None) -> DashboardSummary:
        summary = DashboardSummary(company_id=company_id)
        filters: Dict[str, Any] = {"status": list(OPEN_STATUSES)}
        if company_id:
            filters["company_id"] = company_id

        offset = 0
        while True:
            cases = await self._case_repo.list(filters, limit=self.DASHBOARD_PAGE_SIZE, offset=offset)
            for case in cases:
                summary.total_open += 1
                try:
                    evaluation = await self._monitor.evaluate_case(case)
                except NoPolicyDefinedException:
                    summary.missing_policy += 1
                    continue
                summary.status_counts[evaluation.status] += 1
            if len(cases) < self.DASHBOARD_PAGE_SIZE:
                break
            offset += self.DASHBOARD_PAGE_SIZE

        return summary


class SLAPolicyService:
    """Configuration surface for company-specific policies."""

    def __init__(self, policy_repository: ISLAPolicyRepository, clock: Clock):
        self._policy_repo = policy_repository
        self._clock = clock

    async def save_policy(self, payload: Union[PolicyCreateDTO, Mapping[str, Any]]) -> SLAPolicy:
        """
        Create or replace the company policy for (case_type, priority).

        Raises:
            ValidationException: non-positive budgets or resolution < response
        """
        request = parse_payload(PolicyCreateDTO, payload)
        now = self._clock.now()
        existing = await self._policy_repo.find(
            request.company_id, request.case_type, request.priority, active_only=False
        )

        policy = SLAPolicy(
            id=existing.id if existing else uuid4(),
            company_id=request.company_id,
            case_type=request.case_type,
            priority=request.priority,
            response_time_budget=request.response_time_budget,
            resolution_time_budget=request.resolution_time_budget,
            escalation_time_budget=request.escalation_time_budget,
            is_active=request.is_active,
            scope=PolicyScope.COMPANY if request.case_type else PolicyScope.COMPANY_DEFAULT,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        policy = await self._policy_repo.save(policy)

        logger.info(
            "SLA policy saved",
            extra={
                "policy_id": str(policy.id),
                "company_id": str(policy.company_id),
                "case_type": policy.case_type.value if policy.case_type else None,
                "priority": policy.priority.value if policy.priority else None,
                "created": existing is None,
            }
        )
        return policy

    async def list_policies(self, company_id: Optional[UUID] = None) -> List[SLAPolicy]:
        return await self._policy_repo.list(company_id)
