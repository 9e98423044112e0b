"""Tests for the Case Store: creation, state machine and optimistic versioning."""

import pytest

from caseflow.cases.domain import Case
from caseflow.config import ActivityType, CaseStatus, CaseVisibility, SLAStatus
from caseflow.core import (
    InvalidTransitionException,
    ResourceNotFoundException,
    StaleWriteException,
    ValidationException,
)
from caseflow.cases.infrastructure import SQLAlchemyCaseRepository


class TestCreate:
    """create() forces open and validates input."""

    async def test_create_forces_open_status(self, case_service, case_payload) -> None:
        case = await case_service.create(case_payload(status="closed"))

        assert case.status == CaseStatus.OPEN
        assert case.closed_at is None
        assert case.version == 1
        assert case.visibility == CaseVisibility.INTERNAL
        assert case.client_viewable is False

    async def test_create_appends_client_visible_status_change(self, case_service, case_payload) -> None:
        case = await case_service.create(case_payload(created_by="consultant-1"))

        entries = await case_service.list_activities(case.id)
        assert len(entries) == 1
        assert entries[0].activity_type == ActivityType.STATUS_CHANGE
        assert entries[0].client_visible is True
        assert entries[0].created_by == "consultant-1"

    @pytest.mark.parametrize("field", ["title", "description"])
    async def test_empty_text_rejected(self, case_service, case_payload, field) -> None:
        with pytest.raises(ValidationException):
            await case_service.create(case_payload(**{field: "   "}))

    async def test_unknown_type_rejected(self, case_service, case_payload) -> None:
        with pytest.raises(ValidationException):
            await case_service.create(case_payload(type="astrology"))

    async def test_unknown_source_rejected(self, case_service, case_payload) -> None:
        with pytest.raises(ValidationException):
            await case_service.create(case_payload(source="carrier_pigeon"))

    async def test_tags_are_a_set(self, case_service, case_payload) -> None:
        case = await case_service.create(case_payload(tags=["payroll", "payroll", "urgent"]))
        stored = await case_service.get(case.id)
        assert stored.tags == {"payroll", "urgent"}


class TestTransition:
    """State machine, closed_at bookkeeping and response marker."""

    async def test_close_sets_closed_at_and_reopen_clears_it(self, case_service, case_payload, clock) -> None:
        case = await case_service.create(case_payload())

        clock.advance(hours=1)
        result = await case_service.transition(case.id, case.version, CaseStatus.CLOSED)
        assert result.case.status == CaseStatus.CLOSED
        assert result.case.closed_at == clock.now()
        assert result.previous_status == CaseStatus.OPEN

        reopened = await case_service.transition(case.id, result.case.version, CaseStatus.OPEN)
        assert reopened.case.status == CaseStatus.OPEN
        assert reopened.case.closed_at is None

    async def test_same_state_rejected(self, case_service, case_payload) -> None:
        case = await case_service.create(case_payload())
        with pytest.raises(InvalidTransitionException):
            await case_service.transition(case.id, case.version, CaseStatus.OPEN)

    async def test_unknown_status_rejected(self, case_service, case_payload) -> None:
        case = await case_service.create(case_payload())
        with pytest.raises(ValidationException):
            await case_service.transition(case.id, case.version, "archived")

        # Nothing was written
        assert (await case_service.require(case.id)).version == case.version

    async def test_closed_only_reopens(self, case_service, case_payload) -> None:
        case = await case_service.create(case_payload())
        closed = await case_service.transition(case.id, case.version, CaseStatus.CLOSED)
        with pytest.raises(InvalidTransitionException):
            await case_service.transition(case.id, closed.case.version, CaseStatus.WAITING)

    async def test_skip_to_closed_from_waiting(self, case_service, case_payload) -> None:
        case = await case_service.create(case_payload())
        waiting = await case_service.transition(case.id, case.version, CaseStatus.WAITING)
        closed = await case_service.transition(case.id, waiting.case.version, CaseStatus.CLOSED)
        assert closed.case.is_closed

    async def test_stale_version_rejected_and_nothing_written(self, case_service, case_payload) -> None:
        case = await case_service.create(case_payload())
        await case_service.transition(case.id, case.version, CaseStatus.IN_PROGRESS)

        with pytest.raises(StaleWriteException):
            await case_service.transition(case.id, case.version, CaseStatus.WAITING)

        stored = await case_service.require(case.id)
        assert stored.status == CaseStatus.IN_PROGRESS
        assert stored.version == 2

    async def test_unknown_case(self, case_service) -> None:
        from uuid import uuid4
        with pytest.raises(ResourceNotFoundException):
            await case_service.transition(uuid4(), 1, CaseStatus.CLOSED)

    async def test_first_move_from_open_is_the_response(self, case_service, case_payload, clock) -> None:
        case = await case_service.create(case_payload())
        clock.advance(hours=2)
        result = await case_service.transition(case.id, case.version, CaseStatus.IN_PROGRESS)
        assert result.case.first_response_at == clock.now()

        clock.advance(hours=1)
        back = await case_service.transition(case.id, result.case.version, CaseStatus.OPEN)
        again = await case_service.transition(case.id, back.case.version, CaseStatus.WAITING)
        assert again.case.first_response_at == result.case.first_response_at

    async def test_transition_returns_recomputed_sla(self, case_service, case_payload, clock) -> None:
        case = await case_service.create(case_payload())
        clock.advance(hours=3)
        result = await case_service.transition(case.id, case.version, CaseStatus.WAITING)
        assert result.sla.status == SLAStatus.ON_TRACK

    async def test_status_change_activity_recorded(self, case_service, case_payload) -> None:
        case = await case_service.create(case_payload())
        await case_service.transition(case.id, case.version, CaseStatus.CLOSED, actor="consultant-2")

        entries = await case_service.list_activities(case.id)
        assert [e.activity_type for e in entries] == [ActivityType.STATUS_CHANGE] * 2
        assert entries[-1].metadata["to"] == "closed"
        assert "closed_at" in entries[-1].metadata


class TestReassignAndNotes:

    async def test_reassign_bumps_version_and_logs(self, case_service, case_payload) -> None:
        case = await case_service.create(case_payload(assigned_to="alice"))
        updated = await case_service.reassign(case.id, case.version, "bob", team="payroll")

        assert updated.assigned_to == "bob"
        assert updated.assigned_team == "payroll"
        assert updated.version == 2

        entries = await case_service.list_activities(case.id)
        assert entries[-1].activity_type == ActivityType.ASSIGNMENT_CHANGE
        assert entries[-1].metadata == {"from": "alice", "to": "bob", "team": "payroll"}

    async def test_reassign_requires_current_version(self, case_service, case_payload) -> None:
        case = await case_service.create(case_payload())
        await case_service.reassign(case.id, case.version, "bob")
        with pytest.raises(StaleWriteException):
            await case_service.reassign(case.id, case.version, "carol")

    async def test_notes_default_to_internal(self, case_service, case_payload) -> None:
        case = await case_service.create(case_payload())
        await case_service.add_note(case.id, "Called HR lead", created_by="alice")
        await case_service.add_note(case.id, "We are reviewing the register", client_visible=True)

        internal = await case_service.list_activities(case.id, include_internal=True)
        public = await case_service.list_activities(case.id, include_internal=False)
        assert len(internal) == 3
        assert [e.content for e in public] == ["Case opened", "We are reviewing the register"]

    async def test_mark_responded_is_idempotent(self, case_service, case_payload, clock) -> None:
        case = await case_service.create(case_payload())
        clock.advance(hours=1)
        first = await case_service.mark_responded(case.id)
        clock.advance(hours=1)
        second = await case_service.mark_responded(case.id)

        assert first.case.first_response_at == second.case.first_response_at
        assert second.case.status == CaseStatus.OPEN


class TestCaseRepository:

    async def test_list_filters(self, session, case_service, case_payload) -> None:
        a = await case_service.create(case_payload(title="Benefits enrolment", type="benefits"))
        await case_service.create(case_payload(title="Payroll run"))
        await case_service.transition(a.id, a.version, CaseStatus.CLOSED)

        open_cases = await case_service.list_cases({"status": "open"})
        assert [c.title for c in open_cases] == ["Payroll run"]

        found = await case_service.list_cases({"search": "enrol"})
        assert [c.id for c in found] == [a.id]

    async def test_concurrent_save_is_stale(self, session, case_service, case_payload, clock) -> None:
        repo = SQLAlchemyCaseRepository(session)
        case = await case_service.create(case_payload())

        first = await repo.get(case.id)
        second = await repo.get(case.id)
        first.transition_to(CaseStatus.IN_PROGRESS, clock.now())
        await repo.save(first, expected_version=1)

        second.transition_to(CaseStatus.CLOSED, clock.now())
        with pytest.raises(StaleWriteException):
            await repo.save(second, expected_version=1)

    async def test_actual_hours_increment(self, session, case_service, case_payload) -> None:
        repo = SQLAlchemyCaseRepository(session)
        case = await case_service.create(case_payload())
        await repo.increment_actual_hours(case.id, 1.5)
        await repo.increment_actual_hours(case.id, 2.0)
        assert (await repo.get(case.id)).actual_hours == 3.5


class TestCaseEntity:

    def test_closed_at_invariant(self, company_id, clock) -> None:
        with pytest.raises(ValueError):
            Case(
                id=company_id,
                company_id=company_id,
                title="t",
                description="d",
                type="hr",
                priority="low",
                source="manual",
                created_at=clock.now(),
                updated_at=clock.now(),
                status=CaseStatus.CLOSED,
            )
