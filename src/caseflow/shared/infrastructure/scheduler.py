"""
Job Scheduler
=============

Wrapper around APScheduler for the engine's background jobs (SLA sweep,
monthly retainer rollover). Manages the lifecycle of the scheduler and jobs.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from caseflow.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

JobFunc = Callable[[], Awaitable[Any]]


class JobScheduler:
    """
    Collects job definitions, then starts them together.

    Every job runs with ``max_instances=1``: a slow sweep is skipped rather
    than stacked.
    """

    def __init__(self, timezone: str = "UTC"):
        self._timezone = timezone
        self._jobs: List[Dict[str, Any]] = []
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    def add_interval_job(self, job_id: str, func: JobFunc, seconds: int, name: Optional[str] = None) -> None:
        self._jobs.append({
            "func": func,
            "trigger": "interval",
            "id": job_id,
            "name": name or job_id,
            "seconds": seconds,
            "misfire_grace_time": seconds,
        })

    def add_cron_job(self, job_id: str, func: JobFunc, name: Optional[str] = None, **cron: Any) -> None:
        """Schedule ``func`` with cron fields, e.g. ``day=1, hour=0, minute=5``."""
        self._jobs.append({
            "func": func,
            "trigger": "cron",
            "id": job_id,
            "name": name or job_id,
            "misfire_grace_time": 3600,
            **cron,
        })

    async def start(self) -> None:
        """Start the scheduler with the registered jobs."""
        if self._running:
            logger.warning("Scheduler already running")
            return

        self._scheduler = AsyncIOScheduler(timezone=self._timezone)
        for job in self._jobs:
            self._scheduler.add_job(max_instances=1, replace_existing=True, coalesce=True, **job)

        self._scheduler.start()
        self._running = True

        logger.info(
            "Scheduler started",
            extra={"jobs": [job["id"] for job in self._jobs]}
        )

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if not self._running:
            return

        if self._scheduler:
            self._scheduler.shutdown(wait=False)

        self._running = False
        logger.info("Scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def job_ids(self) -> List[str]:
        return [job["id"] for job in self._jobs]
