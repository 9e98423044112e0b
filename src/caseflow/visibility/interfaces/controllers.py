"""
Visibility Controllers (API Routes)
===================================

Share-token management and the public client view.

The public routes never return internal fields: responses are built only
from CaseTimelineView.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.config import CaseVisibility
from caseflow.dependencies import get_visibility_gateway
from caseflow.infrastructure.database import get_session
from caseflow.visibility.application import (
    CaseTimelineResponse,
    FeedbackDTO,
    FeedbackResponse,
    RevokeResponse,
    ShareGrantDTO,
    ShareGrantResponse,
    VisibilityGateway,
)

router = APIRouter(prefix="/cases", tags=["Client Visibility"])
shared_router = APIRouter(prefix="/shared", tags=["Client Portal"])


@router.post(
    "/{case_id}/share",
    response_model=ShareGrantResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Grant client access",
    description="""
    Issues a share token and makes the case client-viewable. Any previous
    token for the case stops working. The token is only returned here.
    """,
)
async def grant_access(
    case_id: UUID,
    request: ShareGrantDTO,
    gateway: VisibilityGateway = Depends(get_visibility_gateway),
    session: AsyncSession = Depends(get_session)
):
    issued = await gateway.grant(case_id, contact_email=request.contact_email, actor=request.actor)
    await session.commit()
    return ShareGrantResponse.from_domain(issued)


@router.delete("/{case_id}/share", response_model=RevokeResponse, summary="Revoke client access")
async def revoke_access(
    case_id: UUID,
    actor: Optional[str] = Query(None),
    gateway: VisibilityGateway = Depends(get_visibility_gateway),
    session: AsyncSession = Depends(get_session)
):
    case, revoked = await gateway.revoke(case_id, actor=actor)
    await session.commit()
    return RevokeResponse(
        case_id=case.id,
        revoked_grants=revoked,
        visibility=CaseVisibility(case.visibility).value,
        client_viewable=case.client_viewable,
    )


@shared_router.get("/{token}", response_model=CaseTimelineResponse, summary="Client case view")
async def view_shared_case(
    token: str,
    gateway: VisibilityGateway = Depends(get_visibility_gateway)
):
    return CaseTimelineResponse.from_domain(await gateway.resolve(token))


@shared_router.post(
    "/{token}/feedback",
    response_model=FeedbackResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit client feedback",
    description="Accepted once per link, and only after the case is closed.",
)
async def submit_feedback(
    token: str,
    request: FeedbackDTO,
    gateway: VisibilityGateway = Depends(get_visibility_gateway),
    session: AsyncSession = Depends(get_session)
):
    feedback = await gateway.submit_feedback(token, request.sentiment, request.comment)
    await session.commit()
    return FeedbackResponse.from_domain(feedback)
