"""HTTP-level tests: routing, payload shapes and error mapping."""

from uuid import uuid4

import pytest

from caseflow.core import (
    ExternalServiceException,
    InvalidStateException,
    InvalidTransitionException,
    NoPolicyDefinedException,
    ResourceNotFoundException,
    ValidationException,
)
from caseflow.shared.api.middleware import status_code_for


@pytest.fixture
def create_body(company_id):
    return {
        "company_id": str(company_id),
        "title": "Payroll discrepancy",
        "description": "Two employees were paid the wrong rate.",
        "type": "general_support",
        "priority": "medium",
    }


async def _create(client, body) -> dict:
    resp = await client.post("/cases", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestCaseRoutes:
    """Case store over HTTP."""

    async def test_create_ignores_supplied_status(self, client, create_body) -> None:
        data = await _create(client, {**create_body, "status": "closed"})

        assert data["status"] == "open"
        assert data["version"] == 1
        assert data["visibility"] == "internal"
        assert "X-Correlation-ID" in (await client.get(f"/cases/{data['id']}")).headers

    async def test_create_rejects_unknown_type(self, client, create_body) -> None:
        resp = await client.post("/cases", json={**create_body, "type": "astrology"})
        assert resp.status_code == 422

    async def test_transition_returns_sla(self, client, create_body) -> None:
        case = await _create(client, create_body)

        resp = await client.post(
            f"/cases/{case['id']}/transition",
            json={"version": 1, "status": "in_progress", "actor": "agent"},
        )

        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["status"] == "in_progress"
        assert data["version"] == 2
        assert data["first_response_at"] is not None
        assert data["sla_status"] == "on_track"

    async def test_stale_version_conflict(self, client, create_body) -> None:
        case = await _create(client, create_body)
        await client.post(f"/cases/{case['id']}/transition", json={"version": 1, "status": "in_progress"})

        resp = await client.post(f"/cases/{case['id']}/transition", json={"version": 1, "status": "waiting"})

        assert resp.status_code == 409
        body = resp.json()
        assert body["error"] == "StaleWriteException"
        assert body["details"]["expected_version"] == 1
        assert "correlation_id" in body

    async def test_same_state_transition_conflict(self, client, create_body) -> None:
        case = await _create(client, create_body)
        resp = await client.post(f"/cases/{case['id']}/transition", json={"version": 1, "status": "open"})
        assert resp.status_code == 409
        assert resp.json()["error"] == "InvalidTransitionException"

    async def test_unknown_case(self, client) -> None:
        resp = await client.get(f"/cases/{uuid4()}")
        assert resp.status_code == 404
        assert resp.json()["error"] == "ResourceNotFoundException"

    async def test_list_filters_by_status(self, client, create_body, company_id) -> None:
        first = await _create(client, create_body)
        await _create(client, create_body)
        await client.post(f"/cases/{first['id']}/transition", json={"version": 1, "status": "closed"})

        resp = await client.get("/cases", params={"company_id": str(company_id), "status": "closed"})

        assert resp.status_code == 200
        assert [c["id"] for c in resp.json()] == [first["id"]]

    async def test_notes_and_activity_projection(self, client, create_body) -> None:
        case = await _create(client, create_body)
        await client.post(f"/cases/{case['id']}/notes", json={"content": "Internal only"})
        resp = await client.post(
            f"/cases/{case['id']}/notes",
            json={"content": "We are on it", "client_visible": True},
        )
        assert resp.status_code == 201

        everything = (await client.get(f"/cases/{case['id']}/activities")).json()
        public = (await client.get(f"/cases/{case['id']}/activities", params={"include_internal": False})).json()

        assert len(everything) == 3
        assert [a["content"] for a in public] == ["Case opened", "We are on it"]


class TestSharedRoutes:
    """Client access by token."""

    async def test_bad_token_is_not_found(self, client) -> None:
        resp = await client.get("/shared/not-a-token")
        assert resp.status_code == 404
        assert resp.json()["error"] == "InvalidOrExpiredTokenException"

    async def test_share_view_and_revoke(self, client, create_body) -> None:
        case = await _create(client, create_body)

        grant = await client.post(f"/cases/{case['id']}/share", json={"contact_email": "client@example.com"})
        assert grant.status_code == 201
        token = grant.json()["token"]

        view = await client.get(f"/shared/{token}")
        assert view.status_code == 200
        assert view.json()["title"] == "Payroll discrepancy"
        assert "internal_notes" not in view.json()

        revoke = await client.delete(f"/cases/{case['id']}/share")
        assert revoke.status_code == 200
        assert revoke.json()["client_viewable"] is False

        assert (await client.get(f"/shared/{token}")).status_code == 404

    async def test_revoke_without_grant(self, client, create_body) -> None:
        case = await _create(client, create_body)
        resp = await client.delete(f"/cases/{case['id']}/share")
        assert resp.status_code == 409


class TestLedgerAndSweepRoutes:
    """Retainer ledger, SLA sweep and alerts over HTTP."""

    async def test_service_log_posting(self, client, company_id, sender) -> None:
        resp = await client.post("/retainers", json={
            "company_id": str(company_id),
            "period": "2024-03-01",
            "retainer_hours": 10,
        })
        assert resp.status_code == 201

        resp = await client.post("/service-logs", json={
            "company_id": str(company_id),
            "hours_logged": 8,
            "service_date": "2024-03-05",
            "description": "Quarterly filing",
        })
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["consumed_hours"] == 8
        assert data["retainer"]["hours_used"] == 8
        assert [a["payload"]["threshold"] for a in data["alerts"]] == [75]
        # Delivered after commit
        assert len(sender.sent) == 1

        summary = await client.get(f"/retainers/{company_id}/2024-03-01/summary")
        assert summary.status_code == 200
        assert summary.json()["billable_hours"] == 8

    async def test_zero_hours_rejected(self, client, company_id) -> None:
        resp = await client.post("/service-logs", json={
            "company_id": str(company_id),
            "hours_logged": 0,
            "service_date": "2024-03-05",
            "description": "Nothing",
        })
        assert resp.status_code == 422

    async def test_sweep_raises_breach_alert(self, client, create_body, clock, sender) -> None:
        case = await _create(client, create_body)
        clock.advance(hours=5)

        resp = await client.post("/sla/sweep")

        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["evaluated"] == 1
        assert data["alerts_raised"] == 1
        assert data["delivered"] == 1
        assert sender.sent[0].case_id is not None

        alerts = (await client.get("/alerts", params={"case_id": case["id"]})).json()
        assert [a["alert_type"] for a in alerts] == ["sla_breach"]
        assert alerts[0]["notification_sent"] is True

        again = (await client.post("/sla/sweep")).json()
        assert again["alerts_raised"] == 0

    async def test_case_sla_endpoint(self, client, create_body, clock) -> None:
        case = await _create(client, create_body)
        clock.advance(hours=3)

        resp = await client.get(f"/sla/cases/{case['id']}")

        assert resp.status_code == 200
        assert resp.json()["sla_status"] == "response_due_soon"


class TestServiceRoutes:
    """Health and root."""

    async def test_health(self, client) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] in ("healthy", "degraded")
        assert resp.json()["checks"]["sla_config"] == "loaded"

    async def test_root(self, client) -> None:
        resp = await client.get("/")
        assert resp.status_code == 200
        assert resp.json()["service"] == "Caseflow"


class TestErrorMapping:
    """Typed errors map to stable HTTP statuses."""

    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (ValidationException("bad"), 422),
            (InvalidTransitionException(uuid4(), "open", "open"), 409),
            (InvalidStateException("nope"), 409),
            (ResourceNotFoundException("Case", "x"), 404),
            (NoPolicyDefinedException(uuid4(), "general_support", "medium"), 500),
            (ExternalServiceException("Slack", "down"), 502),
        ],
    )
    def test_status_codes(self, exc, expected) -> None:
        assert status_code_for(exc) == expected
