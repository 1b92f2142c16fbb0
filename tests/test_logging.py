"""Structured Logging Tests."""

import structlog

from rampart_config.settings import Settings
from rampart_obs.logging import bind_action, bind_request, service_fields


def test_service_fields_stamp_every_event():
    settings = Settings(OTEL_SERVICE_NAME="rampart-test", ENVIRONMENT="staging")
    add_fields = service_fields(settings)

    event = add_fields(None, "info", {"event": "action_proposed"})

    assert event == {
        "event": "action_proposed",
        "service": "rampart-test",
        "environment": "staging",
    }


def test_service_fields_keep_explicit_values():
    add_fields = service_fields(Settings())
    event = add_fields(None, "info", {"event": "x", "service": "other"})
    assert event["service"] == "other"


def test_bind_action_scopes_ids_to_block():
    with bind_action("act-1", "analyst_agent_1"):
        assert structlog.contextvars.get_contextvars() == {
            "action_id": "act-1",
            "agent_id": "analyst_agent_1",
        }

    assert structlog.contextvars.get_contextvars() == {}


def test_bind_request_nests_with_action():
    with bind_request("req-1"), bind_action("act-1", "a"):
        assert structlog.contextvars.get_contextvars()["request_id"] == "req-1"

    assert "request_id" not in structlog.contextvars.get_contextvars()
