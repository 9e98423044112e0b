"""
Case Controllers (API Routes)
=============================

FastAPI routes for the case lifecycle.

Controllers are thin - they delegate to CaseService and own the commit.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.activity.application import ActivityEntryResponse, NoteCreateDTO
from caseflow.alerts.application import AlertDispatcher
from caseflow.cases.application import (
    CaseCreateDTO,
    CaseReassignDTO,
    CaseRespondDTO,
    CaseResponse,
    CaseService,
    CaseTransitionDTO,
)
from caseflow.config import CasePriority, CaseStatus, CaseType
from caseflow.dependencies import commit_and_notify, get_case_service, get_dispatcher
from caseflow.infrastructure.database import get_session

router = APIRouter(prefix="/cases", tags=["Cases"])


# ========== Example payloads for Swagger ==========

CASE_CREATE_EXAMPLE = {
    "company_id": "5f0c6a1e-2b7d-4c1e-9a3b-2d4e6f8a0b1c",
    "title": "Payroll discrepancy for March",
    "description": "Two employees were paid at last year's rate.",
    "type": "payroll",
    "priority": "high",
    "source": "email",
    "assigned_to": "consultant-17",
    "tags": ["payroll", "rates"],
}


# ========== Route Handlers ==========

@router.post(
    "",
    response_model=CaseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a case",
    description="Creates a case in status `open`. A `status` in the body is ignored.",
    openapi_extra={"requestBody": {"content": {"application/json": {"example": CASE_CREATE_EXAMPLE}}}},
)
async def create_case(
    request: CaseCreateDTO,
    service: CaseService = Depends(get_case_service),
    session: AsyncSession = Depends(get_session),
    dispatcher: AlertDispatcher = Depends(get_dispatcher)
):
    case = await service.create(request)
    await commit_and_notify(session, dispatcher)
    return CaseResponse.from_domain(case)


@router.get("", response_model=List[CaseResponse], summary="List cases")
async def list_cases(
    company_id: Optional[UUID] = Query(None),
    case_status: Optional[CaseStatus] = Query(None, alias="status"),
    case_type: Optional[CaseType] = Query(None, alias="type"),
    priority: Optional[CasePriority] = Query(None),
    assigned_to: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Text search on title and description"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: CaseService = Depends(get_case_service)
):
    cases = await service.list_cases({
        "company_id": company_id,
        "status": case_status,
        "type": case_type,
        "priority": priority,
        "assigned_to": assigned_to,
        "search": search,
        "limit": limit,
        "offset": offset,
    })
    return [CaseResponse.from_domain(case) for case in cases]


@router.get("/{case_id}", response_model=CaseResponse, summary="Get a case")
async def get_case(case_id: UUID, service: CaseService = Depends(get_case_service)):
    return CaseResponse.from_domain(await service.require(case_id))


@router.post(
    "/{case_id}/transition",
    response_model=CaseResponse,
    summary="Change case status",
    description="""
    Moves a case to a new status. `version` must be the version last read;
    a mismatch returns 409 and nothing is written.

    Allowed: open -> in_progress/waiting/closed, in_progress -> waiting/closed,
    waiting -> in_progress/closed, closed -> open.
    """,
)
async def transition_case(
    case_id: UUID,
    request: CaseTransitionDTO,
    service: CaseService = Depends(get_case_service),
    session: AsyncSession = Depends(get_session),
    dispatcher: AlertDispatcher = Depends(get_dispatcher)
):
    result = await service.transition(case_id, request.version, request.status, actor=request.actor)
    await commit_and_notify(session, dispatcher)
    return CaseResponse.from_domain(result.case, result.sla.status if result.sla else None)


@router.post("/{case_id}/reassign", response_model=CaseResponse, summary="Reassign a case")
async def reassign_case(
    case_id: UUID,
    request: CaseReassignDTO,
    service: CaseService = Depends(get_case_service),
    session: AsyncSession = Depends(get_session),
    dispatcher: AlertDispatcher = Depends(get_dispatcher)
):
    case = await service.reassign(
        case_id,
        request.version,
        request.assigned_to,
        team=request.assigned_team,
        actor=request.actor,
    )
    await commit_and_notify(session, dispatcher)
    return CaseResponse.from_domain(case)


@router.post("/{case_id}/respond", response_model=CaseResponse, summary="Record first response")
async def respond_to_case(
    case_id: UUID,
    request: Optional[CaseRespondDTO] = None,
    service: CaseService = Depends(get_case_service),
    session: AsyncSession = Depends(get_session),
    dispatcher: AlertDispatcher = Depends(get_dispatcher)
):
    result = await service.mark_responded(case_id, actor=request.actor if request else None)
    await commit_and_notify(session, dispatcher)
    return CaseResponse.from_domain(result.case, result.sla.status if result.sla else None)


@router.post(
    "/{case_id}/notes",
    response_model=ActivityEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a note",
)
async def add_note(
    case_id: UUID,
    request: NoteCreateDTO,
    service: CaseService = Depends(get_case_service),
    session: AsyncSession = Depends(get_session)
):
    entry = await service.add_note(
        case_id,
        request.content,
        created_by=request.created_by,
        client_visible=request.client_visible,
    )
    await session.commit()
    return ActivityEntryResponse.from_domain(entry)


@router.get(
    "/{case_id}/activities",
    response_model=List[ActivityEntryResponse],
    summary="Case activity timeline",
)
async def list_activities(
    case_id: UUID,
    include_internal: bool = Query(True, description="False returns only client-visible entries"),
    service: CaseService = Depends(get_case_service)
):
    entries = await service.list_activities(case_id, include_internal=include_internal)
    return [ActivityEntryResponse.from_domain(entry) for entry in entries]
