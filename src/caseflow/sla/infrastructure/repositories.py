"""
SLA Infrastructure Repositories
===============================

Concrete implementations of repository interfaces using SQLAlchemy.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.config import CasePriority, CaseType
from caseflow.sla.application import ISLAPolicyRepository
from caseflow.sla.domain import PolicyScope, SLAPolicy
from caseflow.sla.infrastructure.models import SLAPolicyModel


def _to_domain(model: SLAPolicyModel) -> SLAPolicy:
    case_type = CaseType(model.case_type) if model.case_type else None
    return SLAPolicy(
        id=model.id,
        company_id=model.company_id,
        case_type=case_type,
        priority=CasePriority(model.priority) if model.priority else None,
        response_time_budget=model.response_time_budget,
        resolution_time_budget=model.resolution_time_budget,
        escalation_time_budget=model.escalation_time_budget,
        is_active=model.is_active,
        scope=PolicyScope.COMPANY if case_type else PolicyScope.COMPANY_DEFAULT,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class SQLAlchemySLAPolicyRepository(ISLAPolicyRepository):
    """SQLAlchemy implementation of the company policy repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _lookup(
        self,
        company_id: UUID,
        case_type: Optional[CaseType],
        priority: Optional[CasePriority]
    ):
        stmt = select(SLAPolicyModel).where(SLAPolicyModel.company_id == company_id)
        if case_type is None:
            stmt = stmt.where(SLAPolicyModel.case_type.is_(None), SLAPolicyModel.priority.is_(None))
        else:
            stmt = stmt.where(
                SLAPolicyModel.case_type == CaseType(case_type).value,
                SLAPolicyModel.priority == CasePriority(priority).value,
            )
        return stmt

    async def find(
        self,
        company_id: UUID,
        case_type: Optional[CaseType],
        priority: Optional[CasePriority],
        active_only: bool = True
    ) -> Optional[SLAPolicy]:
        stmt = self._lookup(company_id, case_type, priority)
        if active_only:
            stmt = stmt.where(SLAPolicyModel.is_active == True)  # noqa: E712
        result = await self._session.execute(stmt.limit(1))
        model = result.scalar_one_or_none()
        return _to_domain(model) if model else None

    async def save(self, policy: SLAPolicy) -> SLAPolicy:
        result = await self._session.execute(
            self._lookup(policy.company_id, policy.case_type, policy.priority).limit(1)
        )
        model = result.scalar_one_or_none()
        if model is None:
            model = SLAPolicyModel(
                id=policy.id,
                company_id=policy.company_id,
                case_type=policy.case_type.value if policy.case_type else None,
                priority=policy.priority.value if policy.priority else None,
                created_at=policy.created_at,
            )
            self._session.add(model)

        model.response_time_budget = policy.response_time_budget
        model.resolution_time_budget = policy.resolution_time_budget
        model.escalation_time_budget = policy.escalation_time_budget
        model.is_active = policy.is_active
        model.updated_at = policy.updated_at

        await self._session.flush()
        return _to_domain(model)

    async def list(self, company_id: Optional[UUID] = None) -> List[SLAPolicy]:
        stmt = select(SLAPolicyModel)
        if company_id:
            stmt = stmt.where(SLAPolicyModel.company_id == company_id)
        stmt = stmt.order_by(SLAPolicyModel.company_id, SLAPolicyModel.case_type, SLAPolicyModel.priority)
        result = await self._session.execute(stmt)
        return [_to_domain(model) for model in result.scalars().all()]
