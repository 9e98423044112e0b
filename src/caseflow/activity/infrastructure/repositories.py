"""
Activity Infrastructure Repositories
====================================
"""

from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.activity.application import IActivityRepository
from caseflow.activity.domain import ActivityEntry
from caseflow.activity.infrastructure.models import ActivityEntryModel
from caseflow.config import ActivityType


def _to_domain(model: ActivityEntryModel) -> ActivityEntry:
    return ActivityEntry(
        id=model.id,
        case_id=model.case_id,
        activity_type=ActivityType(model.activity_type),
        content=model.content,
        metadata=dict(model.metadata_ or {}),
        created_by=model.created_by,
        created_at=model.created_at,
        client_visible=model.client_visible,
    )


class SQLAlchemyActivityRepository(IActivityRepository):
    """Insert-only activity storage."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def add(self, entry: ActivityEntry) -> ActivityEntry:
        model = ActivityEntryModel(
            case_id=entry.case_id,
            activity_type=entry.activity_type.value,
            content=entry.content,
            metadata_=dict(entry.metadata),
            created_by=entry.created_by,
            created_at=entry.created_at,
            client_visible=entry.client_visible,
        )
        self._session.add(model)
        await self._session.flush()
        return _to_domain(model)

    async def list_for_case(self, case_id: UUID) -> List[ActivityEntry]:
        stmt = (
            select(ActivityEntryModel)
            .where(ActivityEntryModel.case_id == case_id)
            .order_by(ActivityEntryModel.created_at.asc(), ActivityEntryModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [_to_domain(model) for model in result.scalars().all()]
