"""
Dependencies
============

Composition root. Builds repositories and services around one database
session so that a request (or a background job) is a single unit of work.

Process-wide collaborators (clock, notification sender, SLA config) live on
``app.state`` and are set up in the application lifespan. The ``build_*``
functions are plain so background jobs can use them without FastAPI.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.activity.application import ActivityLog
from caseflow.activity.infrastructure import SQLAlchemyActivityRepository
from caseflow.alerts.application import AlertDispatcher, NotificationSender
from caseflow.alerts.infrastructure import SQLAlchemyAlertRepository
from caseflow.cases.application import CaseService
from caseflow.cases.infrastructure import SQLAlchemyCaseRepository
from caseflow.config import settings
from caseflow.infrastructure.database import get_session
from caseflow.retainer.application import RetainerLedger
from caseflow.retainer.infrastructure import (
    SQLAlchemyRetainerRepository,
    SQLAlchemyServiceLogRepository,
)
from caseflow.shared.infrastructure.clock import Clock
from caseflow.sla.application import (
    ISLAConfigProvider,
    SLAMonitor,
    SLAPolicyResolver,
    SLAPolicyService,
    SLAService,
    SLASweepService,
)
from caseflow.sla.infrastructure import SQLAlchemySLAPolicyRepository
from caseflow.visibility.application import VisibilityGateway
from caseflow.visibility.infrastructure import (
    SQLAlchemyFeedbackRepository,
    SQLAlchemyShareGrantRepository,
)


# ========== Builders ==========

def build_dispatcher(session: AsyncSession, sender: NotificationSender, clock: Clock) -> AlertDispatcher:
    return AlertDispatcher(SQLAlchemyAlertRepository(session), sender, clock)


def build_sla_monitor(
    session: AsyncSession,
    dispatcher: AlertDispatcher,
    clock: Clock,
    config_provider: ISLAConfigProvider
) -> SLAMonitor:
    resolver = SLAPolicyResolver(SQLAlchemySLAPolicyRepository(session), config_provider)
    return SLAMonitor(resolver, dispatcher, clock, settings.sla_warning_ratio)


def build_case_service(
    session: AsyncSession,
    dispatcher: AlertDispatcher,
    clock: Clock,
    config_provider: ISLAConfigProvider
) -> CaseService:
    return CaseService(
        SQLAlchemyCaseRepository(session),
        ActivityLog(SQLAlchemyActivityRepository(session)),
        clock,
        sla_monitor=build_sla_monitor(session, dispatcher, clock, config_provider),
    )


def build_sweep_service(
    session: AsyncSession,
    dispatcher: AlertDispatcher,
    clock: Clock,
    config_provider: ISLAConfigProvider
) -> SLASweepService:
    return SLASweepService(
        SQLAlchemyCaseRepository(session),
        build_sla_monitor(session, dispatcher, clock, config_provider),
        dispatcher,
        batch_size=settings.sla_sweep_batch_size,
    )


def build_retainer_ledger(session: AsyncSession, dispatcher: AlertDispatcher, clock: Clock) -> RetainerLedger:
    return RetainerLedger(
        SQLAlchemyRetainerRepository(session),
        SQLAlchemyServiceLogRepository(session),
        SQLAlchemyCaseRepository(session),
        dispatcher,
        clock,
        warning_thresholds=settings.retainer_warning_thresholds,
    )


async def commit_and_notify(session: AsyncSession, dispatcher: AlertDispatcher) -> int:
    """
    Commit the unit of work, then deliver the alerts it raised.

    Notifications never go out for a transaction that rolled back. Delivery
    markers are committed separately; a crash in between leaves the alerts
    pending for the next sweep.
    """
    await session.commit()
    if not dispatcher.queued:
        return 0
    delivered = await dispatcher.flush()
    await session.commit()
    return delivered


# ========== FastAPI dependencies ==========

def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_notification_sender(request: Request) -> NotificationSender:
    return request.app.state.notification_sender


def get_sla_config_provider(request: Request) -> ISLAConfigProvider:
    return request.app.state.sla_config


async def get_dispatcher(
    session: AsyncSession = Depends(get_session),
    sender: NotificationSender = Depends(get_notification_sender),
    clock: Clock = Depends(get_clock)
) -> AlertDispatcher:
    """One dispatcher per request; FastAPI caches it for the request."""
    return build_dispatcher(session, sender, clock)


async def get_case_service(
    session: AsyncSession = Depends(get_session),
    dispatcher: AlertDispatcher = Depends(get_dispatcher),
    clock: Clock = Depends(get_clock),
    config_provider: ISLAConfigProvider = Depends(get_sla_config_provider)
) -> CaseService:
    return build_case_service(session, dispatcher, clock, config_provider)


async def get_sla_service(
    session: AsyncSession = Depends(get_session),
    dispatcher: AlertDispatcher = Depends(get_dispatcher),
    clock: Clock = Depends(get_clock),
    config_provider: ISLAConfigProvider = Depends(get_sla_config_provider)
) -> SLAService:
    return SLAService(
        SQLAlchemyCaseRepository(session),
        build_sla_monitor(session, dispatcher, clock, config_provider),
    )


async def get_sla_policy_service(
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock)
) -> SLAPolicyService:
    return SLAPolicyService(SQLAlchemySLAPolicyRepository(session), clock)


async def get_sweep_service(
    session: AsyncSession = Depends(get_session),
    dispatcher: AlertDispatcher = Depends(get_dispatcher),
    clock: Clock = Depends(get_clock),
    config_provider: ISLAConfigProvider = Depends(get_sla_config_provider)
) -> SLASweepService:
    return build_sweep_service(session, dispatcher, clock, config_provider)


async def get_retainer_ledger(
    session: AsyncSession = Depends(get_session),
    dispatcher: AlertDispatcher = Depends(get_dispatcher),
    clock: Clock = Depends(get_clock)
) -> RetainerLedger:
    return build_retainer_ledger(session, dispatcher, clock)


async def get_visibility_gateway(
    session: AsyncSession = Depends(get_session),
    case_service: CaseService = Depends(get_case_service),
    clock: Clock = Depends(get_clock)
) -> VisibilityGateway:
    return VisibilityGateway(
        SQLAlchemyShareGrantRepository(session),
        SQLAlchemyFeedbackRepository(session),
        case_service,
        ActivityLog(SQLAlchemyActivityRepository(session)),
        clock,
        token_bytes=settings.share_token_bytes,
        token_ttl_days=settings.share_token_ttl_days,
    )
