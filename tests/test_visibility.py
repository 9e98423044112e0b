"""Tests for share tokens, the client timeline and client feedback."""

import pytest
from sqlalchemy import select

from caseflow.activity.application import ActivityLog
from caseflow.activity.infrastructure import SQLAlchemyActivityRepository
from caseflow.config import CaseStatus, CaseVisibility, FeedbackSentiment
from caseflow.core import InvalidOrExpiredTokenException, InvalidStateException, ValidationException
from caseflow.visibility.application import VisibilityGateway
from caseflow.visibility.domain import hash_token
from caseflow.visibility.infrastructure import (
    SQLAlchemyFeedbackRepository,
    SQLAlchemyShareGrantRepository,
    ShareGrantModel,
)


def _gateway(session, case_service, clock, ttl_days=None) -> VisibilityGateway:
    return VisibilityGateway(
        SQLAlchemyShareGrantRepository(session),
        SQLAlchemyFeedbackRepository(session),
        case_service,
        ActivityLog(SQLAlchemyActivityRepository(session)),
        clock,
        token_bytes=32,
        token_ttl_days=ttl_days,
    )


@pytest.fixture
def gateway(session, case_service, clock):
    return _gateway(session, case_service, clock)


@pytest.fixture
async def case(case_service, case_payload):
    return await case_service.create(case_payload())


class TestGrantAndRevoke:
    """One valid token per case; visibility fields move together."""

    async def test_grant_makes_case_client_visible(self, gateway, case, case_service) -> None:
        issued = await gateway.grant(case.id, contact_email="client@example.com", actor="agent")

        assert issued.token
        assert issued.replaced_grants == 0
        stored = await case_service.require(case.id)
        assert stored.client_viewable is True
        assert stored.visibility == CaseVisibility.CLIENT_VIEWABLE

    async def test_only_digest_is_stored(self, gateway, case, session) -> None:
        issued = await gateway.grant(case.id)

        rows = (await session.execute(select(ShareGrantModel))).scalars().all()
        assert [row.token_hash for row in rows] == [hash_token(issued.token)]
        assert all(row.token_hash != issued.token for row in rows)

    async def test_regenerate_invalidates_previous_token(self, gateway, case) -> None:
        first = await gateway.grant(case.id)
        second = await gateway.grant(case.id)

        assert second.replaced_grants == 1
        with pytest.raises(InvalidOrExpiredTokenException):
            await gateway.resolve(first.token)
        assert (await gateway.resolve(second.token)).case_id == case.id

    async def test_revoke(self, gateway, case) -> None:
        issued = await gateway.grant(case.id)

        updated, revoked = await gateway.revoke(case.id, actor="agent")

        assert revoked == 1
        assert updated.client_viewable is False
        assert updated.visibility == CaseVisibility.INTERNAL
        with pytest.raises(InvalidOrExpiredTokenException):
            await gateway.resolve(issued.token)

    async def test_revoke_without_token(self, gateway, case) -> None:
        with pytest.raises(InvalidStateException):
            await gateway.revoke(case.id)

    async def test_invalid_contact_email(self, gateway, case) -> None:
        with pytest.raises(ValidationException):
            await gateway.grant(case.id, contact_email="not-an-email")

    async def test_token_expires(self, session, case_service, case, clock) -> None:
        gateway = _gateway(session, case_service, clock, ttl_days=7)
        issued = await gateway.grant(case.id)

        clock.advance(days=6)
        await gateway.resolve(issued.token)

        clock.advance(days=1)
        with pytest.raises(InvalidOrExpiredTokenException):
            await gateway.resolve(issued.token)

    @pytest.mark.parametrize("token", ["", "unknown-token"])
    async def test_unknown_token(self, gateway, token) -> None:
        with pytest.raises(InvalidOrExpiredTokenException):
            await gateway.resolve(token)


class TestTimeline:
    """Token holders see a projection, never internal entries or fields."""

    async def test_internal_entries_hidden(self, gateway, case, case_service) -> None:
        await case_service.add_note(case.id, "Salary data attached", created_by="agent")
        await case_service.add_note(case.id, "We are looking into it", client_visible=True)
        issued = await gateway.grant(case.id)

        view = await gateway.resolve(issued.token)

        contents = [entry.content for entry in view.entries]
        assert "We are looking into it" in contents
        assert "Salary data attached" not in contents
        assert all(entry.client_visible for entry in view.entries)
        assert not hasattr(view, "internal_notes")
        assert not hasattr(view, "assigned_to")

    async def test_timeline_follows_status(self, gateway, case, case_service) -> None:
        issued = await gateway.grant(case.id)
        await case_service.transition(case.id, (await case_service.require(case.id)).version, CaseStatus.IN_PROGRESS)

        view = await gateway.resolve(issued.token)
        assert view.status == CaseStatus.IN_PROGRESS


class TestFeedback:
    """Feedback on closed cases only, once per grant."""

    async def test_feedback_requires_closed_case(self, gateway, case) -> None:
        issued = await gateway.grant(case.id)

        with pytest.raises(InvalidStateException):
            await gateway.submit_feedback(issued.token, FeedbackSentiment.POSITIVE)

    async def test_feedback_once_per_grant(self, gateway, case, case_service) -> None:
        issued = await gateway.grant(case.id, contact_email="client@example.com")
        current = await case_service.require(case.id)
        await case_service.transition(case.id, current.version, CaseStatus.CLOSED)

        feedback = await gateway.submit_feedback(issued.token, FeedbackSentiment.POSITIVE, "Quick turnaround")
        assert feedback.contact_email == "client@example.com"

        with pytest.raises(InvalidStateException):
            await gateway.submit_feedback(issued.token, FeedbackSentiment.NEGATIVE)

        activities = await case_service.list_activities(case.id)
        assert any(a.metadata.get("event") == "client_feedback" for a in activities)

    async def test_feedback_with_revoked_token(self, gateway, case, case_service) -> None:
        issued = await gateway.grant(case.id)
        current = await case_service.require(case.id)
        await case_service.transition(case.id, current.version, CaseStatus.CLOSED)
        await gateway.revoke(case.id)

        with pytest.raises(InvalidOrExpiredTokenException):
            await gateway.submit_feedback(issued.token, FeedbackSentiment.NEUTRAL)

    async def test_unknown_sentiment(self, gateway, case) -> None:
        issued = await gateway.grant(case.id)

        with pytest.raises(ValidationException):
            await gateway.submit_feedback(issued.token, "ecstatic")


def test_hash_is_sha256_hex() -> None:
    digest = hash_token("abc")
    assert len(digest) == 64
    assert digest == hash_token("abc")
    assert digest != hash_token("abd")
