"""
Visibility Infrastructure Repositories
======================================
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.infrastructure.database import dialect_insert
from caseflow.visibility.application import IFeedbackRepository, IShareGrantRepository
from caseflow.visibility.domain import ClientFeedback, ShareGrant
from caseflow.visibility.infrastructure.models import ClientFeedbackModel, ShareGrantModel


def _to_domain(model: ShareGrantModel) -> ShareGrant:
    return ShareGrant(
        id=model.id,
        case_id=model.case_id,
        token_hash=model.token_hash,
        contact_email=model.contact_email,
        created_by=model.created_by,
        created_at=model.created_at,
        expires_at=model.expires_at,
        revoked=model.revoked,
        revoked_at=model.revoked_at,
    )


class SQLAlchemyShareGrantRepository(IShareGrantRepository):
    """SQLAlchemy implementation of the share grant repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def add(self, grant: ShareGrant) -> ShareGrant:
        model = ShareGrantModel(
            id=grant.id,
            case_id=grant.case_id,
            token_hash=grant.token_hash,
            contact_email=grant.contact_email,
            created_by=grant.created_by,
            created_at=grant.created_at,
            expires_at=grant.expires_at,
            revoked=False,
        )
        self._session.add(model)
        await self._session.flush()
        return _to_domain(model)

    async def get_by_token_hash(self, token_hash: str) -> Optional[ShareGrant]:
        stmt = (
            select(ShareGrantModel)
            .where(ShareGrantModel.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return _to_domain(model) if model else None

    async def revoke_active(self, case_id: UUID, revoked_at: datetime) -> int:
        stmt = (
            update(ShareGrantModel)
            .where(ShareGrantModel.case_id == case_id, ShareGrantModel.revoked == False)  # noqa: E712
            .values(revoked=True, revoked_at=revoked_at)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount


class SQLAlchemyFeedbackRepository(IFeedbackRepository):
    """SQLAlchemy implementation of the feedback repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def add_if_absent(self, feedback: ClientFeedback) -> bool:
        insert = dialect_insert(self._session)
        stmt = (
            insert(ClientFeedbackModel)
            .values(
                id=feedback.id,
                grant_id=feedback.grant_id,
                case_id=feedback.case_id,
                sentiment=feedback.sentiment.value,
                comment=feedback.comment,
                contact_email=feedback.contact_email,
                submitted_at=feedback.submitted_at,
            )
            .on_conflict_do_nothing(index_elements=["grant_id"])
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1
