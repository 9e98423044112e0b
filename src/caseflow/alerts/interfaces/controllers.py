"""
Alert Controllers (API Routes)
==============================

Read access to raised alerts and their delivery status.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from caseflow.alerts.application import AlertDispatcher, AlertResponse
from caseflow.dependencies import get_dispatcher

router = APIRouter(prefix="/alerts", tags=["Alerts"])


@router.get("", response_model=List[AlertResponse], summary="List alerts")
async def list_alerts(
    company_id: Optional[UUID] = Query(None),
    case_id: Optional[UUID] = Query(None),
    pending_only: bool = Query(False, description="Only alerts not yet delivered"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    dispatcher: AlertDispatcher = Depends(get_dispatcher)
):
    alerts = await dispatcher.list_alerts(
        company_id=company_id,
        case_id=case_id,
        pending_only=pending_only,
        limit=limit,
        offset=offset,
    )
    return [AlertResponse.from_domain(alert) for alert in alerts]
