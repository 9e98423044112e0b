"""Tests for the append-only activity log and its client projection."""

from uuid import uuid4

import pytest
from sqlalchemy import select

from caseflow.activity.application import ActivityLog
from caseflow.activity.domain import ActivityEntry, client_projection, is_client_visible
from caseflow.activity.infrastructure import ActivityEntryModel, SQLAlchemyActivityRepository
from caseflow.config import ActivityType
from caseflow.core import RepositoryException


@pytest.fixture
def activity_log(session) -> ActivityLog:
    return ActivityLog(SQLAlchemyActivityRepository(session))


def _entry(clock, activity_type=ActivityType.NOTE, client_visible=False, case_id=None, content="Called the client"):
    return ActivityEntry(
        case_id=case_id or uuid4(),
        activity_type=activity_type,
        content=content,
        created_at=clock.now(),
        client_visible=client_visible,
    )


class TestClientProjection:
    """Visible only when flagged AND of a client-facing type."""

    def test_flag_required(self, clock) -> None:
        assert not is_client_visible(_entry(clock))
        assert is_client_visible(_entry(clock, client_visible=True))

    def test_assignment_changes_never_visible(self, clock) -> None:
        entry = _entry(clock, ActivityType.ASSIGNMENT_CHANGE, client_visible=True)
        assert client_projection([entry]) == []

    def test_empty_content_rejected(self, clock) -> None:
        with pytest.raises(ValueError):
            _entry(clock, content="  ")


class TestActivityLog:
    """Ordering and immutability of stored entries."""

    async def test_entries_oldest_first_with_stable_ties(self, activity_log, clock) -> None:
        case_id = uuid4()
        first = await activity_log.append(_entry(clock, case_id=case_id, content="first"))
        second = await activity_log.append(_entry(clock, case_id=case_id, content="second"))
        clock.advance(minutes=5)
        third = await activity_log.append(_entry(clock, case_id=case_id, content="third", client_visible=True))

        entries = await activity_log.list_for_case(case_id)
        assert [e.id for e in entries] == [first.id, second.id, third.id]

        public = await activity_log.list_for_case(case_id, include_internal=False)
        assert [e.content for e in public] == ["third"]

    async def test_update_rejected(self, activity_log, session, clock) -> None:
        stored = await activity_log.append(_entry(clock))
        model = (await session.execute(
            select(ActivityEntryModel).where(ActivityEntryModel.id == stored.id)
        )).scalar_one()

        model.content = "rewritten"
        with pytest.raises(RepositoryException):
            await session.flush()
        await session.rollback()

    async def test_delete_rejected(self, activity_log, session, clock) -> None:
        stored = await activity_log.append(_entry(clock))
        model = (await session.execute(
            select(ActivityEntryModel).where(ActivityEntryModel.id == stored.id)
        )).scalar_one()

        await session.delete(model)
        with pytest.raises(RepositoryException):
            await session.flush()
        await session.rollback()
