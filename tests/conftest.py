"""Shared pytest fixtures for the caseflow test suite.

Provides:
- db_engine: in-memory SQLite async engine with all tables
- session: async session bound to that engine
- clock: FrozenClock driven by the tests
- sender: NotificationSender that records what it was asked to deliver
- service fixtures wired the same way the API wires them
- client: AsyncClient with the session dependency overridden
"""

from datetime import datetime, timezone
from typing import List
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import caseflow.models  # noqa: F401 - register ORM models on Base.metadata
from caseflow.alerts.application import NotificationSender
from caseflow.alerts.domain import Alert
from caseflow.config import CasePriority, CaseType
from caseflow.dependencies import (
    build_case_service,
    build_dispatcher,
    build_retainer_ledger,
    build_sla_monitor,
    build_sweep_service,
)
from caseflow.infrastructure.database import Base, get_session
from caseflow.shared.infrastructure.clock import FrozenClock
from caseflow.sla.domain import PolicyBudget, SLAConfig
from caseflow.sla.infrastructure import SLAConfigManager

T0 = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


class RecordingSender(NotificationSender):
    """Collects delivered alerts; ``fail`` makes every send report failure."""

    def __init__(self):
        self.sent: List[Alert] = []
        self.fail = False

    async def send(self, alert: Alert) -> bool:
        if self.fail:
            return False
        self.sent.append(alert)
        return True


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with all tables."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def session(db_engine):
    maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with maker() as s:
        yield s


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(T0)


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def sla_config() -> SLAConfigManager:
    """Global defaults: 8h/72h fallback, general_support/medium at 4h/24h."""
    return SLAConfigManager(SLAConfig(
        default=PolicyBudget(response_time_budget=8, resolution_time_budget=72),
        policies={
            CaseType.GENERAL_SUPPORT: {
                CasePriority.MEDIUM: PolicyBudget(
                    response_time_budget=4,
                    resolution_time_budget=24,
                    escalation_time_budget=6,
                ),
            },
        },
    ))


@pytest.fixture
def dispatcher(session, sender, clock):
    return build_dispatcher(session, sender, clock)


@pytest.fixture
def case_service(session, dispatcher, clock, sla_config):
    return build_case_service(session, dispatcher, clock, sla_config)


@pytest.fixture
def sla_monitor(session, dispatcher, clock, sla_config):
    return build_sla_monitor(session, dispatcher, clock, sla_config)


@pytest.fixture
def sweep_service(session, dispatcher, clock, sla_config):
    return build_sweep_service(session, dispatcher, clock, sla_config)


@pytest.fixture
def ledger(session, dispatcher, clock):
    return build_retainer_ledger(session, dispatcher, clock)


@pytest.fixture
def company_id():
    return uuid4()


@pytest.fixture
def case_payload(company_id):
    def _payload(**overrides):
        payload = {
            "company_id": company_id,
            "title": "Payroll discrepancy",
            "description": "Two employees were paid the wrong rate.",
            "type": CaseType.GENERAL_SUPPORT,
            "priority": CasePriority.MEDIUM,
        }
        payload.update(overrides)
        return payload
    return _payload


@pytest.fixture
async def client(session, clock, sender, sla_config):
    """AsyncClient against the app with the test session and collaborators."""
    from caseflow.main import app

    async def _override_session():
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    app.dependency_overrides[get_session] = _override_session
    app.state.clock = clock
    app.state.notification_sender = sender
    app.state.sla_config = sla_config

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
