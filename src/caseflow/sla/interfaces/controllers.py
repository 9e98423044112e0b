"""
SLA Controllers (API Routes)
============================

FastAPI routes for SLA status, the dashboard, company policies and the
manual sweep trigger.

Controllers are thin - they delegate to application services.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.alerts.application import AlertDispatcher
from caseflow.dependencies import (
    commit_and_notify,
    get_dispatcher,
    get_sla_policy_service,
    get_sla_service,
    get_sweep_service,
)
from caseflow.infrastructure.database import get_session
from caseflow.shared.infrastructure.logging import get_context_logger
from caseflow.sla.application import (
    CaseSLAResponse,
    DashboardResponse,
    PolicyCreateDTO,
    PolicyResponse,
    SLAPolicyService,
    SLAService,
    SLASweepService,
    SweepResponse,
)

router = APIRouter(prefix="/sla", tags=["SLA Monitoring"])


# ========== Example payloads for Swagger ==========

POLICY_CREATE_EXAMPLE = {
    "company_id": "5f0c6a1e-2b7d-4c1e-9a3b-2d4e6f8a0b1c",
    "case_type": "payroll",
    "priority": "high",
    "response_time_budget": 2,
    "resolution_time_budget": 24,
    "escalation_time_budget": 4,
}


# ========== Route Handlers ==========

@router.get(
    "/cases/{case_id}",
    response_model=CaseSLAResponse,
    summary="SLA status of a case",
    description="""
    Evaluates both SLA clocks of a case now.

    A breach first noticed here raises its alert like the background sweep
    would; repeated reads never raise it twice.
    """,
)
async def get_case_sla(
    case_id: UUID,
    service: SLAService = Depends(get_sla_service),
    session: AsyncSession = Depends(get_session),
    dispatcher: AlertDispatcher = Depends(get_dispatcher)
):
    case, evaluation = await service.case_status(case_id)
    await commit_and_notify(session, dispatcher)
    return CaseSLAResponse.from_domain(case, evaluation)


@router.get("/dashboard", response_model=DashboardResponse, summary="SLA dashboard")
async def get_dashboard(
    company_id: Optional[UUID] = Query(None, description="Restrict to one company"),
    service: SLAService = Depends(get_sla_service),
    session: AsyncSession = Depends(get_session),
    dispatcher: AlertDispatcher = Depends(get_dispatcher)
):
    summary = await service.dashboard(company_id)
    await commit_and_notify(session, dispatcher)
    return DashboardResponse.from_domain(summary)


@router.get("/policies", response_model=List[PolicyResponse], summary="List company SLA policies")
async def list_policies(
    company_id: Optional[UUID] = Query(None),
    service: SLAPolicyService = Depends(get_sla_policy_service)
):
    return [PolicyResponse.from_domain(p) for p in await service.list_policies(company_id)]


@router.post(
    "/policies",
    response_model=PolicyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create or replace a company SLA policy",
    description="Omit `case_type` and `priority` to set the company default. Budgets are hours.",
    openapi_extra={"requestBody": {"content": {"application/json": {"example": POLICY_CREATE_EXAMPLE}}}},
)
async def save_policy(
    request: PolicyCreateDTO,
    service: SLAPolicyService = Depends(get_sla_policy_service),
    session: AsyncSession = Depends(get_session)
):
    policy = await service.save_policy(request)
    await session.commit()
    return PolicyResponse.from_domain(policy)


@router.post("/sweep", response_model=SweepResponse, summary="Run the SLA sweep now")
async def run_sweep(
    http_request: Request,
    service: SLASweepService = Depends(get_sweep_service),
    session: AsyncSession = Depends(get_session),
    dispatcher: AlertDispatcher = Depends(get_dispatcher)
):
    logger = get_context_logger(__name__, getattr(http_request.state, "correlation_id", None))
    logger.info("Manual SLA sweep requested")

    result = await service.run()
    delivered = await commit_and_notify(session, dispatcher)
    return SweepResponse(
        evaluated=result.evaluated,
        alerts_raised=result.alerts_raised,
        missing_policy=result.missing_policy,
        redelivered=result.redelivered,
        delivered=delivered,
        status_counts=result.status_counts,
    )
