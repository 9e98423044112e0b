"""Tests for the job scheduler wrapper and the background jobs it runs."""

from datetime import date

import pytest

from caseflow.dependencies import build_case_service, build_dispatcher, build_retainer_ledger
from caseflow.infrastructure.database import (
    close_database,
    create_tables,
    get_session_context,
    init_database,
)
from caseflow.jobs import (
    RETAINER_ROLLOVER_JOB_ID,
    SLA_SWEEP_JOB_ID,
    run_monthly_rollover,
    run_sla_sweep,
)
from caseflow.shared.infrastructure.scheduler import JobScheduler


async def _noop() -> None:
    return None


class TestJobScheduler:
    """Registration and lifecycle."""

    async def test_start_and_stop(self) -> None:
        scheduler = JobScheduler()
        scheduler.add_interval_job(SLA_SWEEP_JOB_ID, _noop, seconds=300)
        scheduler.add_cron_job(RETAINER_ROLLOVER_JOB_ID, _noop, day=1, hour=0, minute=5)

        assert scheduler.job_ids == [SLA_SWEEP_JOB_ID, RETAINER_ROLLOVER_JOB_ID]
        assert scheduler.is_running is False

        await scheduler.start()
        assert scheduler.is_running is True

        # Second start is ignored
        await scheduler.start()
        assert scheduler.is_running is True

        await scheduler.stop()
        assert scheduler.is_running is False

    async def test_stop_without_start(self) -> None:
        scheduler = JobScheduler()
        await scheduler.stop()
        assert scheduler.is_running is False


@pytest.fixture
async def job_database(tmp_path):
    """File-backed database behind the module-level session maker."""
    init_database(f"sqlite+aiosqlite:///{tmp_path / 'jobs.db'}")
    await create_tables()
    yield
    await close_database()


class TestJobs:
    """Jobs run in their own session against the configured database."""

    async def test_sweep_job(self, job_database, clock, sender, sla_config, case_payload) -> None:
        async with get_session_context() as session:
            dispatcher = build_dispatcher(session, sender, clock)
            await build_case_service(session, dispatcher, clock, sla_config).create(case_payload())

        clock.advance(hours=5)
        result = await run_sla_sweep(clock, sender, sla_config)

        assert result.evaluated == 1
        assert result.alerts_raised == 1
        assert len(sender.sent) == 1

    async def test_rollover_job(self, job_database, clock, sender, company_id) -> None:
        async with get_session_context() as session:
            ledger = build_retainer_ledger(session, build_dispatcher(session, sender, clock), clock)
            await ledger.configure({
                "company_id": company_id,
                "period": date(2024, 2, 1),
                "retainer_hours": 20,
                "max_rollover_hours": 5,
            })

        assert await run_monthly_rollover(clock, sender) == 1
        # Already applied for March
        assert await run_monthly_rollover(clock, sender) == 0
