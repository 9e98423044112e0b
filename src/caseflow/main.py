"""
Caseflow - Main Application
===========================

Case lifecycle and SLA engine for an HR consulting practice.

Modules:
- Cases: lifecycle state machine with optimistic versioning
- Activity: append-only case timeline
- SLA: policy resolution, breach detection, background sweep
- Retainer: hour consumption, overage, waivers, monthly rollover
- Visibility: share tokens, client timeline, feedback
- Alerts: deduplicated alerts and notification delivery

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities and value objects
- Infrastructure: Database, YAML config, Slack
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

# Configuration
from caseflow.config import settings

# Infrastructure
from caseflow.alerts.infrastructure import build_notification_sender
from caseflow.infrastructure.database import close_database, create_tables, get_engine, init_database
from caseflow.shared.infrastructure.clock import SystemClock
from caseflow.shared.infrastructure.scheduler import JobScheduler
from caseflow.sla.infrastructure import SLAConfigManager

# Background jobs
from caseflow.jobs import (
    RETAINER_ROLLOVER_JOB_ID,
    SLA_SWEEP_JOB_ID,
    run_monthly_rollover,
    run_sla_sweep,
)

# Module Routers
from caseflow.alerts.interfaces import alerts_router
from caseflow.cases.interfaces import cases_router
from caseflow.retainer.interfaces import retainer_router
from caseflow.sla.interfaces import sla_router
from caseflow.visibility.interfaces import shared_router, visibility_router

# Middleware and logging
from caseflow.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    register_error_handlers,
)
from caseflow.shared.infrastructure.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database and create tables
    3. Load SLA configuration and watch it for changes
    4. Pick the notification sender
    5. Start the job scheduler (SLA sweep, monthly rollover)

    SHUTDOWN:
    1. Stop the scheduler
    2. Stop the config watcher
    3. Close the notification sender
    4. Close database connections
    """
    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting Caseflow", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    logger.info("Initializing database")
    init_database()

    # Tables are created for development; production uses migrations
    try:
        await create_tables()
    except (OSError, SQLAlchemyError) as e:
        logger.warning(
            "Database not available - running in degraded mode",
            extra={"error": str(e)}
        )

    logger.info("Loading SLA configuration")
    sla_config = SLAConfigManager()
    sla_config.load(settings.sla_config_path)
    sla_config.start_watching()

    clock = SystemClock()
    sender = build_notification_sender()

    scheduler = JobScheduler(timezone="UTC")
    if settings.sla_sweep_interval_seconds > 0:
        async def sla_sweep_job():
            await run_sla_sweep(clock, sender, sla_config)

        scheduler.add_interval_job(
            SLA_SWEEP_JOB_ID,
            sla_sweep_job,
            seconds=settings.sla_sweep_interval_seconds,
            name="SLA Sweep Job",
        )
    if settings.retainer_rollover_enabled:
        async def rollover_job():
            await run_monthly_rollover(clock, sender)

        scheduler.add_cron_job(
            RETAINER_ROLLOVER_JOB_ID,
            rollover_job,
            name="Monthly Retainer Rollover",
            day=1,
            hour=0,
            minute=5,
        )
    await scheduler.start()

    # Store collaborators in app state for dependency injection
    app.state.clock = clock
    app.state.notification_sender = sender
    app.state.sla_config = sla_config
    app.state.scheduler = scheduler

    logger.info("Caseflow started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Caseflow")

    await scheduler.stop()
    sla_config.stop_watching()
    await sender.close()
    await close_database()

    logger.info("Caseflow shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Caseflow API",
    description="""
    ## Case Lifecycle & SLA Engine

    Tracks client cases for an HR consulting practice: status changes, SLA
    clocks with breach alerts, retainer hours with overage and rollover, and
    read-only client access through share links.

    All budgets are in hours. Billing periods are calendar months keyed by
    their first day.
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware (last added runs first) ===
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
register_error_handlers(app)

# === Include Module Routers ===
app.include_router(cases_router)
app.include_router(visibility_router)
app.include_router(shared_router)
app.include_router(sla_router)
app.include_router(retainer_router)
app.include_router(alerts_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """
    Health check endpoint for load balancers and orchestrators.

    Reports database connectivity, SLA configuration and scheduler state.
    """
    checks = {}

    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "connected"
    except (RuntimeError, OSError, SQLAlchemyError) as e:
        checks["database"] = f"unavailable: {type(e).__name__}"

    sla_config = getattr(request.app.state, "sla_config", None)
    checks["sla_config"] = "loaded" if sla_config is not None else "not_loaded"

    scheduler = getattr(request.app.state, "scheduler", None)
    checks["scheduler"] = "running" if scheduler and scheduler.is_running else "stopped"

    return {
        "status": "healthy" if checks["database"] == "connected" else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Caseflow",
        "version": settings.app_version,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "cases": {"prefix": "/cases"},
            "sla": {"prefix": "/sla"},
            "retainers": {"prefix": "/retainers", "service_logs": "/service-logs"},
            "visibility": {"prefix": "/cases/{id}/share", "client": "/shared/{token}"},
            "alerts": {"prefix": "/alerts"},
        }
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "caseflow.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
