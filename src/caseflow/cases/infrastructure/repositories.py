"""
Case Infrastructure Repositories
================================

Concrete implementation of the case repository using SQLAlchemy.

Writes are compare-and-swap on ``version``: the UPDATE only matches the row
the caller read, so a concurrent writer makes it affect zero rows.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.cases.application import ICaseRepository
from caseflow.cases.domain import Case
from caseflow.cases.infrastructure.models import CaseModel
from caseflow.config import CasePriority, CaseSource, CaseStatus, CaseType, CaseVisibility
from caseflow.core import ResourceNotFoundException, StaleWriteException


def _to_domain(model: CaseModel) -> Case:
    return Case(
        id=model.id,
        company_id=model.company_id,
        client_id=model.client_id,
        title=model.title,
        description=model.description,
        type=CaseType(model.type),
        priority=CasePriority(model.priority),
        source=CaseSource(model.source),
        status=CaseStatus(model.status),
        visibility=CaseVisibility(model.visibility),
        client_viewable=model.client_viewable,
        created_at=model.created_at,
        updated_at=model.updated_at,
        closed_at=model.closed_at,
        first_response_at=model.first_response_at,
        due_date=model.due_date,
        estimated_hours=model.estimated_hours,
        actual_hours=model.actual_hours,
        assigned_to=model.assigned_to,
        assigned_team=model.assigned_team,
        tags=set(model.tags or []),
        internal_notes=model.internal_notes,
        external_reference=model.external_reference,
        version=model.version,
    )


def _mutable_columns(case: Case) -> dict:
    """Columns a save may change. actual_hours is only ever incremented."""
    return {
        "title": case.title,
        "description": case.description,
        "type": case.type.value,
        "priority": case.priority.value,
        "status": case.status.value,
        "visibility": case.visibility.value,
        "client_viewable": case.client_viewable,
        "updated_at": case.updated_at,
        "closed_at": case.closed_at,
        "first_response_at": case.first_response_at,
        "due_date": case.due_date,
        "estimated_hours": case.estimated_hours,
        "assigned_to": case.assigned_to,
        "assigned_team": case.assigned_team,
        "tags": sorted(case.tags),
        "internal_notes": case.internal_notes,
        "external_reference": case.external_reference,
    }


class SQLAlchemyCaseRepository(ICaseRepository):
    """
    SQLAlchemy implementation of case repository.

    Handles persistence of Case entities using async SQLAlchemy.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, case_id: UUID) -> Optional[Case]:
        # Bypass the identity map so a re-read sees concurrent writes
        stmt = (
            select(CaseModel)
            .where(CaseModel.id == case_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return _to_domain(model) if model else None

    async def add(self, case: Case) -> Case:
        model = CaseModel(
            id=case.id,
            company_id=case.company_id,
            client_id=case.client_id,
            source=case.source.value,
            created_at=case.created_at,
            actual_hours=case.actual_hours,
            version=1,
            **_mutable_columns(case),
        )
        self._session.add(model)
        await self._session.flush()
        return _to_domain(model)

    async def save(self, case: Case, expected_version: int) -> Case:
        stmt = (
            update(CaseModel)
            .where(CaseModel.id == case.id, CaseModel.version == expected_version)
            .values(version=CaseModel.version + 1, **_mutable_columns(case))
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)

        if result.rowcount == 0:
            if await self.get(case.id) is None:
                raise ResourceNotFoundException("Case", str(case.id))
            raise StaleWriteException("Case", case.id, expected_version)

        stored = await self.get(case.id)
        return stored

    async def increment_actual_hours(self, case_id: UUID, hours: float) -> None:
        stmt = (
            update(CaseModel)
            .where(CaseModel.id == case_id)
            .values(actual_hours=CaseModel.actual_hours + hours)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise ResourceNotFoundException("Case", str(case_id))

    async def list(self, filters: dict, limit: int = 100, offset: int = 0) -> List[Case]:
        """List cases with filters."""
        stmt = select(CaseModel)

        # Apply filters
        conditions = []
        if "company_id" in filters:
            conditions.append(CaseModel.company_id == filters["company_id"])

        if "status" in filters:
            status_list = filters["status"]
            if isinstance(status_list, list):
                conditions.append(CaseModel.status.in_([CaseStatus(s).value for s in status_list]))
            else:
                conditions.append(CaseModel.status == CaseStatus(status_list).value)

        if "type" in filters:
            conditions.append(CaseModel.type == CaseType(filters["type"]).value)

        if "priority" in filters:
            conditions.append(CaseModel.priority == CasePriority(filters["priority"]).value)

        if "assigned_to" in filters:
            conditions.append(CaseModel.assigned_to == filters["assigned_to"])

        if filters.get("search"):
            pattern = f"%{filters['search']}%"
            conditions.append(or_(CaseModel.title.ilike(pattern), CaseModel.description.ilike(pattern)))

        if conditions:
            stmt = stmt.where(and_(*conditions))

        # Order by created_at descending
        stmt = stmt.order_by(CaseModel.created_at.desc(), CaseModel.id).limit(limit).offset(offset)

        result = await self._session.execute(stmt)
        return [_to_domain(model) for model in result.scalars().all()]

    async def list_unclosed(self, limit: int, after_id: Optional[UUID] = None) -> List[Case]:
        stmt = select(CaseModel).where(CaseModel.status != CaseStatus.CLOSED.value)
        if after_id is not None:
            stmt = stmt.where(CaseModel.id > after_id)
        stmt = stmt.order_by(CaseModel.id).limit(limit)

        result = await self._session.execute(stmt)
        return [_to_domain(model) for model in result.scalars().all()]
