"""Tests for alert dispatch, delivery and the notification senders."""

import json
from uuid import uuid4

import httpx
import pytest

from caseflow.alerts.domain import Alert, AlertSeverity, sla_breach_key
from caseflow.alerts.infrastructure import (
    CircuitBreaker,
    CircuitState,
    LogNotificationSender,
    SlackNotificationSender,
)
from caseflow.config import AlertType, SLADimension


def _alert(clock, case_id=None, dimension=SLADimension.RESPONSE) -> Alert:
    case_id = case_id or uuid4()
    return Alert(
        alert_type=AlertType.SLA_BREACH,
        dedup_key=sla_breach_key(case_id, dimension),
        company_id=uuid4(),
        case_id=case_id,
        severity=AlertSeverity.CRITICAL,
        message="Response SLA breached",
        created_at=clock.now(),
        payload={"dimension": dimension.value},
    )


class TestDispatcher:
    """Dedup on insert, delivery after the unit of work."""

    async def test_duplicate_key_suppressed(self, dispatcher, clock) -> None:
        case_id = uuid4()
        first = await dispatcher.dispatch(_alert(clock, case_id))
        second = await dispatcher.dispatch(_alert(clock, case_id))

        assert first is not None
        assert second is None
        assert len(dispatcher.queued) == 1
        assert len(await dispatcher.list_alerts(case_id=case_id)) == 1

    async def test_flush_marks_sent(self, dispatcher, sender, clock) -> None:
        stored = await dispatcher.dispatch(_alert(clock))

        assert await dispatcher.flush() == 1
        assert [a.id for a in sender.sent] == [stored.id]
        assert dispatcher.queued == []

        alerts = await dispatcher.list_alerts(case_id=stored.case_id)
        assert alerts[0].notification_sent is True
        assert alerts[0].notification_sent_at == clock.now()
        assert alerts[0].delivery_attempts == 1

    async def test_failed_delivery_stays_pending(self, dispatcher, sender, clock) -> None:
        sender.fail = True
        stored = await dispatcher.dispatch(_alert(clock))

        assert await dispatcher.flush() == 0
        pending = await dispatcher.list_alerts(pending_only=True)
        assert [a.id for a in pending] == [stored.id]
        assert pending[0].delivery_attempts == 1

        sender.fail = False
        assert await dispatcher.deliver_pending() == 1
        assert await dispatcher.list_alerts(pending_only=True) == []

    def test_dedup_key_required(self, clock) -> None:
        with pytest.raises(ValueError):
            Alert(
                alert_type=AlertType.SLA_BREACH,
                dedup_key="",
                company_id=uuid4(),
                message="x",
                created_at=clock.now(),
            )


class TestCircuitBreaker:
    """CLOSED -> OPEN after N failures -> HALF_OPEN after the timeout."""

    def test_opens_after_threshold(self) -> None:
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=60)
        breaker.record_failure()
        assert breaker.allow_request()
        breaker.record_failure()
        assert breaker.state == CircuitState.OPEN
        assert not breaker.allow_request()

    def test_half_open_then_closed(self) -> None:
        breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=0)
        breaker.record_failure()
        assert breaker.state == CircuitState.HALF_OPEN
        breaker.record_success()
        assert breaker.state == CircuitState.CLOSED

    def test_half_open_failure_reopens(self) -> None:
        breaker = CircuitBreaker(failure_threshold=3, recovery_timeout=0)
        for _ in range(3):
            breaker.record_failure()
        assert breaker.state == CircuitState.HALF_OPEN
        breaker.recovery_timeout = 60
        breaker.record_failure()
        assert breaker.state == CircuitState.OPEN


class TestSenders:
    """Slack webhook via httpx and the log fallback."""

    async def test_slack_posts_block_kit_message(self, clock) -> None:
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, text="ok")

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        sender = SlackNotificationSender("https://hooks.example.com/x", channel="#cases", http_client=client)

        alert = _alert(clock)
        alert.id = uuid4()
        assert await sender.send(alert) is True

        body = json.loads(requests[0].content)
        assert body["channel"] == "#cases"
        assert body["text"] == "Response SLA breached"
        assert body["blocks"][0]["text"]["text"].endswith("SLA Breach")
        await sender.close()

    async def test_slack_failure_trips_breaker(self, clock) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        sender = SlackNotificationSender(
            "https://hooks.example.com/x",
            circuit_breaker=CircuitBreaker(failure_threshold=2, recovery_timeout=60),
            http_client=client,
        )
        alert = _alert(clock)
        alert.id = uuid4()

        assert await sender.send(alert) is False
        assert await sender.send(alert) is False
        # Breaker is open: no further HTTP call
        assert await sender.send(alert) is False
        assert len(calls) == 2
        await sender.close()

    async def test_slack_transport_error(self, clock) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        sender = SlackNotificationSender("https://hooks.example.com/x", http_client=client)
        alert = _alert(clock)
        alert.id = uuid4()

        assert await sender.send(alert) is False
        await sender.close()

    async def test_log_sender_always_delivers(self, clock) -> None:
        alert = _alert(clock)
        alert.id = uuid4()
        assert await LogNotificationSender().send(alert) is True
