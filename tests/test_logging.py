"""Tests for the JSON log formatter."""

import json
import logging

from caseflow.shared.infrastructure.logging import CustomJsonFormatter


def _format(**extra) -> dict:
    formatter = CustomJsonFormatter("%(name)s %(levelname)s %(message)s", environment="test")
    record = logging.LogRecord("caseflow.test", logging.INFO, __file__, 1, "Share token issued", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return json.loads(formatter.format(record))


class TestCustomJsonFormatter:
    """Context fields and redaction."""

    def test_adds_context(self) -> None:
        data = _format(correlation_id="abc")
        assert data["environment"] == "test"
        assert data["correlation_id"] == "abc"
        assert data["message"] == "Share token issued"
        assert "timestamp" in data

    def test_tokens_and_secrets_redacted(self) -> None:
        data = _format(token="plaintext", share_token="plaintext", api_key="k", db_password="p")
        assert {data[k] for k in ("token", "share_token", "api_key", "db_password")} == {"***REDACTED***"}

    def test_ids_kept(self) -> None:
        data = _format(token_id="grant-1", grant_id="grant-1")
        assert data["token_id"] == "grant-1"
        assert data["grant_id"] == "grant-1"
