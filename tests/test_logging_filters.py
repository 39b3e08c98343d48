"""Tests for structured logging: redaction and request id propagation."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from app.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    set_request_id,
)


@pytest.fixture
def capture():
    """Logger wired like production, writing to an in-memory stream."""
    logger = logging.getLogger("test_structured_logging")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    yield logger, stream

    logger.handlers.clear()
    clear_request_id()


def _last_line(stream: StringIO) -> dict:
    return json.loads(stream.getvalue().strip().splitlines()[-1])


def test_redacts_credentials(capture) -> None:
    logger, stream = capture

    logger.info(
        "supabase.request",
        extra={
            "api_key": "sk-secret-123",
            "service_role_key": "eyJhbGciOi-service",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()
    assert "sk-secret-123" not in output
    assert "eyJhbGciOi-service" not in output
    assert _last_line(stream)["safe_field"] == "visible"


def test_redacts_caller_identity(capture) -> None:
    logger, stream = capture

    logger.info(
        "rate_limit.exceeded",
        extra={"client_ip": "203.0.113.7", "email": "member@example.com", "key_hash": "abc123"},
    )

    payload = _last_line(stream)
    assert payload["client_ip"] == "[REDACTED]"
    assert payload["email"] == "[REDACTED]"
    assert payload["key_hash"] == "abc123"


def test_safe_fields_pass_through(capture) -> None:
    logger, stream = capture

    logger.info(
        "network_capacity.rejected",
        extra={"sponsor_id": "sponsor-1", "current_count": 5, "max_allowed": 5},
    )

    payload = _last_line(stream)
    assert payload["message"] == "network_capacity.rejected"
    assert payload["service"] == "sponsor-network-gate"
    assert payload["sponsor_id"] == "sponsor-1"
    assert payload["current_count"] == 5
    assert "[REDACTED]" not in stream.getvalue()


def test_redacts_nested_mappings(capture) -> None:
    logger, stream = capture

    logger.info(
        "http.headers",
        extra={"headers": {"x-api-key": "secret-key", "user-agent": "pytest"}},
    )

    payload = _last_line(stream)
    assert payload["headers"] == {"x-api-key": "[REDACTED]", "user-agent": "pytest"}


def test_request_id_from_context(capture) -> None:
    logger, stream = capture
    set_request_id("req-789")

    logger.info("network_capacity.allowed")

    assert _last_line(stream)["request_id"] == "req-789"
