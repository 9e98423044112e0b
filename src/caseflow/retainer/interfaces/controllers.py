"""
Retainer Controllers (API Routes)
=================================

FastAPI routes for retainer configuration, service-log posting, waivers,
rollover and the monthly usage report.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.alerts.application import AlertDispatcher
from caseflow.dependencies import commit_and_notify, get_dispatcher, get_retainer_ledger
from caseflow.infrastructure.database import get_session
from caseflow.retainer.application import (
    LedgerResultResponse,
    RetainerConfigureDTO,
    RetainerLedger,
    RetainerResponse,
    RolloverDTO,
    RolloverResponse,
    ServiceEntryCreateDTO,
    UsageSummaryResponse,
    WaiveDTO,
    WaiveResponse,
)

router = APIRouter(tags=["Retainers"])


# ========== Example payloads for Swagger ==========

SERVICE_ENTRY_EXAMPLE = {
    "company_id": "5f0c6a1e-2b7d-4c1e-9a3b-2d4e6f8a0b1c",
    "case_id": "0b8e1f2a-7c3d-4e5f-8a9b-1c2d3e4f5a6b",
    "consultant_id": "consultant-17",
    "hours_logged": 1.5,
    "billable": True,
    "service_date": "2024-03-14",
    "description": "Reviewed payroll register and corrected rates",
    "service_type": "payroll",
}


# ========== Route Handlers ==========

@router.post(
    "/retainers",
    response_model=RetainerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create or update a retainer period",
)
async def configure_retainer(
    request: RetainerConfigureDTO,
    ledger: RetainerLedger = Depends(get_retainer_ledger),
    session: AsyncSession = Depends(get_session)
):
    retainer = await ledger.configure(request)
    await session.commit()
    return RetainerResponse.from_domain(retainer)


@router.get(
    "/retainers/{company_id}/{period}",
    response_model=RetainerResponse,
    summary="Get a retainer period",
    description="`period` is any date in the billing month, e.g. `2024-03-01`.",
)
async def get_retainer(
    company_id: UUID,
    period: date,
    ledger: RetainerLedger = Depends(get_retainer_ledger)
):
    return RetainerResponse.from_domain(await ledger.get_retainer(company_id, period))


@router.get(
    "/retainers/{company_id}/{period}/summary",
    response_model=UsageSummaryResponse,
    summary="Monthly usage report",
)
async def get_usage_summary(
    company_id: UUID,
    period: date,
    ledger: RetainerLedger = Depends(get_retainer_ledger)
):
    return UsageSummaryResponse.from_domain(await ledger.usage_summary(company_id, period))


@router.post(
    "/retainers/{company_id}/rollover",
    response_model=RolloverResponse,
    summary="Roll a company into a new period",
    description="Carries unused hours of the previous month, capped. Safe to repeat.",
)
async def rollover_retainer(
    company_id: UUID,
    request: RolloverDTO,
    ledger: RetainerLedger = Depends(get_retainer_ledger),
    session: AsyncSession = Depends(get_session)
):
    result = await ledger.rollover_period(company_id, request.period_start)
    await session.commit()
    return RolloverResponse.from_domain(result)


@router.post(
    "/service-logs",
    response_model=LedgerResultResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a service-log entry",
    description="""
    Records hours against a company and, when billable, consumes them from the
    retainer of the entry's month. Crossing a utilization threshold or the
    retainer limit raises an alert once per period.
    """,
    openapi_extra={"requestBody": {"content": {"application/json": {"example": SERVICE_ENTRY_EXAMPLE}}}},
)
async def post_service_entry(
    request: ServiceEntryCreateDTO,
    ledger: RetainerLedger = Depends(get_retainer_ledger),
    session: AsyncSession = Depends(get_session),
    dispatcher: AlertDispatcher = Depends(get_dispatcher)
):
    result = await ledger.post_service_entry(request)
    await commit_and_notify(session, dispatcher)
    return LedgerResultResponse.from_domain(result)


@router.post("/service-logs/{entry_id}/waive", response_model=WaiveResponse, summary="Waive a service entry")
async def waive_service_entry(
    entry_id: UUID,
    request: WaiveDTO,
    ledger: RetainerLedger = Depends(get_retainer_ledger),
    session: AsyncSession = Depends(get_session)
):
    result = await ledger.waive(entry_id, request)
    await session.commit()
    return WaiveResponse.from_domain(result)
