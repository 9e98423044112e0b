"""
Background Jobs
===============

Scheduled units of work. Each job opens its own session, so it commits or
rolls back independently of any request.
"""

from caseflow.alerts.application import NotificationSender
from caseflow.dependencies import (
    build_dispatcher,
    build_retainer_ledger,
    build_sweep_service,
    commit_and_notify,
)
from caseflow.infrastructure.database import get_session_context
from caseflow.retainer.domain import billing_period_start
from caseflow.shared.infrastructure.clock import Clock
from caseflow.shared.infrastructure.logging import get_logger
from caseflow.sla.application import ISLAConfigProvider, SweepResult

logger = get_logger(__name__)

SLA_SWEEP_JOB_ID = "sla_sweep"
RETAINER_ROLLOVER_JOB_ID = "retainer_rollover"


async def run_sla_sweep(
    clock: Clock,
    sender: NotificationSender,
    config_provider: ISLAConfigProvider
) -> SweepResult:
    """Redeliver pending alerts, then evaluate every non-closed case."""
    async with get_session_context() as session:
        dispatcher = build_dispatcher(session, sender, clock)
        sweeper = build_sweep_service(session, dispatcher, clock, config_provider)
        result = await sweeper.run()
        await commit_and_notify(session, dispatcher)
    return result


async def run_monthly_rollover(clock: Clock, sender: NotificationSender) -> int:
    """Open the current month for every company active last month."""
    period = billing_period_start(clock.now().date())
    async with get_session_context() as session:
        dispatcher = build_dispatcher(session, sender, clock)
        ledger = build_retainer_ledger(session, dispatcher, clock)
        results = await ledger.rollover_all(period)
    applied = sum(1 for result in results if result.applied)
    logger.info(
        "Rollover job finished",
        extra={"period_start": period.isoformat(), "applied": applied}
    )
    return applied
