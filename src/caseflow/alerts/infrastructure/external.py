"""
Alert External Service Integrations
===================================

Outbound notification senders:
- Slack webhook (httpx) behind a circuit breaker
- Log-only sender when no webhook is configured
"""

import time
from typing import Any, Dict, Optional

import httpx

from caseflow.alerts.application import NotificationSender
from caseflow.alerts.domain import Alert, AlertSeverity
from caseflow.config import AlertType, settings
from caseflow.core import ExternalServiceException
from caseflow.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class CircuitState:
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """
    Circuit breaker for preventing cascade failures.

    States:
    - CLOSED: Normal operation, requests pass through
    - OPEN: After N failures, reject all requests for M seconds
    - HALF_OPEN: After timeout, allow one test request
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: Optional[float] = None

    @property
    def state(self) -> str:
        if self._state == CircuitState.OPEN and self._opened_at is not None:
            if time.monotonic() - self._opened_at >= self.recovery_timeout:
                self._state = CircuitState.HALF_OPEN
        return self._state

    def allow_request(self) -> bool:
        return self.state in (CircuitState.CLOSED, CircuitState.HALF_OPEN)

    def record_success(self) -> None:
        self._failure_count = 0
        self._state = CircuitState.CLOSED
        self._opened_at = None

    def record_failure(self) -> None:
        self._failure_count += 1
        if self._state == CircuitState.HALF_OPEN or self._failure_count >= self.failure_threshold:
            self._state = CircuitState.OPEN
            self._opened_at = time.monotonic()
            logger.warning(
                "Circuit breaker opened",
                extra={
                    "failure_count": self._failure_count,
                    "recovery_timeout": self.recovery_timeout
                }
            )


_HEADERS = {
    AlertType.SLA_BREACH: ":rotating_light: SLA Breach",
    AlertType.SLA_ESCALATION: ":arrow_up: SLA Escalation",
    AlertType.RETAINER_THRESHOLD: ":hourglass_flowing_sand: Retainer Usage Warning",
    AlertType.RETAINER_OVERAGE: ":moneybag: Retainer Overage",
}


class SlackNotificationSender(NotificationSender):
    """
    Slack webhook sender.

    One attempt per call: redelivery belongs to the background sweep, so a
    slow or failing webhook never holds up the request that raised the alert.
    """

    def __init__(
        self,
        webhook_url: str,
        channel: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self._webhook_url = webhook_url
        self._channel = channel or settings.slack_channel
        self._timeout = timeout_seconds or settings.slack_timeout_seconds
        self._circuit_breaker = circuit_breaker or CircuitBreaker(failure_threshold=5, recovery_timeout=60)
        self._http_client = http_client

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        return self._circuit_breaker

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    def _build_message(self, alert: Alert) -> Dict[str, Any]:
        """Build Slack Block Kit message."""
        fields = [
            {"type": "mrkdwn", "text": f"*Company:*\n{alert.company_id}"},
            {"type": "mrkdwn", "text": f"*Severity:*\n{alert.severity.title()}"},
        ]
        if alert.case_id:
            fields.append({"type": "mrkdwn", "text": f"*Case:*\n{alert.case_id}"})
        for key in ("dimension", "threshold", "utilization_percent", "overage_hours"):
            if key in alert.payload:
                fields.append({"type": "mrkdwn", "text": f"*{key.replace('_', ' ').title()}:*\n{alert.payload[key]}"})

        return {
            "channel": self._channel,
            "text": alert.message,
            "blocks": [
                {
                    "type": "header",
                    "text": {"type": "plain_text", "text": _HEADERS[alert.alert_type], "emoji": True}
                },
                {"type": "section", "text": {"type": "mrkdwn", "text": alert.message}},
                {"type": "section", "fields": fields},
                {
                    "type": "context",
                    "elements": [{"type": "mrkdwn", "text": f"Raised: {alert.created_at.isoformat()}"}]
                },
            ],
        }

    async def _post(self, alert: Alert) -> None:
        client = await self._get_client()
        response = await client.post(self._webhook_url, json=self._build_message(alert))
        if response.status_code != 200:
            raise ExternalServiceException(
                "Slack",
                f"webhook returned {response.status_code}",
                {"status_code": response.status_code}
            )

    async def send(self, alert: Alert) -> bool:
        if not self._circuit_breaker.allow_request():
            logger.warning(
                "Circuit breaker open, skipping Slack notification",
                extra={"alert_id": str(alert.id)}
            )
            return False

        try:
            await self._post(alert)
        except (httpx.HTTPError, ExternalServiceException) as e:
            self._circuit_breaker.record_failure()
            logger.error(
                "Slack notification failed",
                extra={"error": str(e), "alert_id": str(alert.id)}
            )
            return False

        self._circuit_breaker.record_success()
        logger.info(
            "Slack notification sent",
            extra={"alert_id": str(alert.id), "alert_type": alert.alert_type.value}
        )
        return True

    async def close(self) -> None:
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None


class LogNotificationSender(NotificationSender):
    """Writes alerts to the log; used when no webhook is configured."""

    async def send(self, alert: Alert) -> bool:
        level = logger.error if alert.severity == AlertSeverity.CRITICAL else logger.warning
        level(
            alert.message,
            extra={
                "alert_id": str(alert.id),
                "alert_type": alert.alert_type.value,
                "company_id": str(alert.company_id),
                "case_id": str(alert.case_id) if alert.case_id else None,
            }
        )
        return True


def build_notification_sender() -> NotificationSender:
    """Pick the sender from settings."""
    if settings.slack_webhook_url:
        return SlackNotificationSender(settings.slack_webhook_url)
    logger.info("Slack webhook URL not configured, alerts go to the log")
    return LogNotificationSender()
