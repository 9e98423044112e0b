"""
Retainer Infrastructure Repositories
====================================

Concrete implementations of repository interfaces using SQLAlchemy.

``hours_used`` is never written from a value read earlier: it only moves
through ``UPDATE ... SET hours_used = hours_used + :h``.
"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.core import ResourceNotFoundException
from caseflow.infrastructure.database import dialect_insert
from caseflow.retainer.application import IRetainerRepository, IServiceLogRepository
from caseflow.retainer.domain import Retainer, ServiceLogEntry, next_period_start
from caseflow.retainer.infrastructure.models import RetainerModel, ServiceLogEntryModel


def _retainer_to_domain(model: RetainerModel) -> Retainer:
    return Retainer(
        id=model.id,
        company_id=model.company_id,
        period_start=model.period_start,
        retainer_hours=model.retainer_hours,
        overage_rate=model.overage_rate,
        max_rollover_hours=model.max_rollover_hours,
        tier_name=model.tier_name,
        is_active=model.is_active,
        rollover_bank=model.rollover_bank,
        hours_used=model.hours_used,
        rollover_applied_at=model.rollover_applied_at,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _entry_to_domain(model: ServiceLogEntryModel) -> ServiceLogEntry:
    return ServiceLogEntry(
        id=model.id,
        company_id=model.company_id,
        case_id=model.case_id,
        consultant_id=model.consultant_id,
        hours_logged=model.hours_logged,
        billable=model.billable,
        consumed_hours=model.consumed_hours,
        service_date=model.service_date,
        description=model.description,
        service_type=model.service_type,
        notes=model.notes,
        created_at=model.created_at,
        waived_at=model.waived_at,
        waive_reason=model.waive_reason,
        waived_by=model.waived_by,
    )


class SQLAlchemyRetainerRepository(IRetainerRepository):
    """SQLAlchemy implementation of the retainer repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _load(self, *conditions) -> Optional[RetainerModel]:
        stmt = (
            select(RetainerModel)
            .where(*conditions)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get(self, company_id: UUID, period_start: date) -> Optional[Retainer]:
        model = await self._load(
            RetainerModel.company_id == company_id,
            RetainerModel.period_start == period_start,
        )
        return _retainer_to_domain(model) if model else None

    async def save(self, retainer: Retainer) -> Retainer:
        model = await self._load(
            RetainerModel.company_id == retainer.company_id,
            RetainerModel.period_start == retainer.period_start,
        )
        if model is None:
            model = RetainerModel(
                id=retainer.id,
                company_id=retainer.company_id,
                period_start=retainer.period_start,
                rollover_bank=retainer.rollover_bank,
                hours_used=0.0,
                rollover_applied_at=retainer.rollover_applied_at,
                created_at=retainer.created_at,
            )
            self._session.add(model)

        model.retainer_hours = retainer.retainer_hours
        model.overage_rate = retainer.overage_rate
        model.max_rollover_hours = retainer.max_rollover_hours
        model.tier_name = retainer.tier_name
        model.is_active = retainer.is_active
        model.updated_at = retainer.updated_at

        await self._session.flush()
        return _retainer_to_domain(model)

    async def _adjust(self, retainer_id: UUID, new_value) -> Retainer:
        stmt = (
            update(RetainerModel)
            .where(RetainerModel.id == retainer_id)
            .values(hours_used=new_value)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise ResourceNotFoundException("Retainer", str(retainer_id))

        model = await self._load(RetainerModel.id == retainer_id)
        return _retainer_to_domain(model)

    async def add_hours(self, retainer_id: UUID, hours: float) -> Retainer:
        return await self._adjust(retainer_id, RetainerModel.hours_used + hours)

    async def release_hours(self, retainer_id: UUID, hours: float) -> Retainer:
        floored = case(
            (RetainerModel.hours_used - hours < 0, 0.0),
            else_=RetainerModel.hours_used - hours,
        )
        return await self._adjust(retainer_id, floored)

    async def create_if_absent(self, retainer: Retainer) -> bool:
        insert = dialect_insert(self._session)
        stmt = (
            insert(RetainerModel)
            .values(
                id=retainer.id,
                company_id=retainer.company_id,
                period_start=retainer.period_start,
                retainer_hours=retainer.retainer_hours,
                overage_rate=retainer.overage_rate,
                max_rollover_hours=retainer.max_rollover_hours,
                tier_name=retainer.tier_name,
                is_active=retainer.is_active,
                rollover_bank=retainer.rollover_bank,
                hours_used=retainer.hours_used,
                created_at=retainer.created_at,
                updated_at=retainer.updated_at,
            )
            .on_conflict_do_nothing(index_elements=["company_id", "period_start"])
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def apply_rollover(
        self,
        company_id: UUID,
        period_start: date,
        carry: float,
        applied_at: datetime
    ) -> bool:
        stmt = (
            update(RetainerModel)
            .where(
                RetainerModel.company_id == company_id,
                RetainerModel.period_start == period_start,
                RetainerModel.rollover_applied_at.is_(None),
            )
            .values(rollover_bank=carry, rollover_applied_at=applied_at, updated_at=applied_at)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def list_active(self, period_start: date) -> List[Retainer]:
        stmt = (
            select(RetainerModel)
            .where(RetainerModel.period_start == period_start, RetainerModel.is_active == True)  # noqa: E712
            .order_by(RetainerModel.company_id)
        )
        result = await self._session.execute(stmt)
        return [_retainer_to_domain(model) for model in result.scalars().all()]


class SQLAlchemyServiceLogRepository(IServiceLogRepository):
    """SQLAlchemy implementation of the service-log repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def add(self, entry: ServiceLogEntry) -> ServiceLogEntry:
        model = ServiceLogEntryModel(
            id=entry.id,
            company_id=entry.company_id,
            case_id=entry.case_id,
            consultant_id=entry.consultant_id,
            hours_logged=entry.hours_logged,
            billable=entry.billable,
        consumed_hours=entry.consumed_hours,
            service_date=entry.service_date,
            description=entry.description,
            service_type=entry.service_type,
            notes=entry.notes,
            created_at=entry.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return _entry_to_domain(model)

    async def get(self, entry_id: UUID) -> Optional[ServiceLogEntry]:
        stmt = (
            select(ServiceLogEntryModel)
            .where(ServiceLogEntryModel.id == entry_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return _entry_to_domain(model) if model else None

    async def mark_waived(self, entry: ServiceLogEntry) -> bool:
        stmt = (
            update(ServiceLogEntryModel)
            .where(ServiceLogEntryModel.id == entry.id, ServiceLogEntryModel.billable == True)  # noqa: E712
            .values(
                billable=False,
                waived_at=entry.waived_at,
                waive_reason=entry.waive_reason,
                waived_by=entry.waived_by,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def list_for_period(self, company_id: UUID, period_start: date) -> List[ServiceLogEntry]:
        stmt = (
            select(ServiceLogEntryModel)
            .where(and_(
                ServiceLogEntryModel.company_id == company_id,
                ServiceLogEntryModel.service_date >= period_start,
                ServiceLogEntryModel.service_date < next_period_start(period_start),
            ))
            .order_by(ServiceLogEntryModel.service_date, ServiceLogEntryModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [_entry_to_domain(model) for model in result.scalars().all()]
