"""
Structured Logging (structlog).

Every record carries the service name and environment. Inside
``bind_action`` (the orchestrator wraps each coordinate call in it) records
also carry action_id and agent_id, so layer and handler logs correlate
without passing ids around. ``bind_request`` does the same for request_id
in the HTTP middleware.
"""

import logging
import sys

import structlog
from structlog.contextvars import bound_contextvars
from structlog.typing import EventDict, Processor

from rampart_config.settings import Settings


def service_fields(settings: Settings) -> Processor:
    """Processor stamping service and environment onto each event."""

    def add_service_fields(logger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", settings.OTEL_SERVICE_NAME)
        event_dict.setdefault("environment", settings.ENVIRONMENT)
        return event_dict

    return add_service_fields


def setup_logging(settings: Settings) -> None:
    """
    Configure structlog for structured logging.

    Output format: JSON (default) or text (dev)
    Includes: service, environment, bound action/request ids, timestamp
    """
    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=settings.LOG_LEVEL.upper()
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        service_fields(settings),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_action(action_id: str, agent_id: str):
    """Context manager binding the action's ids to every record logged inside it."""
    return bound_contextvars(action_id=action_id, agent_id=agent_id)


def bind_request(request_id: str):
    return bound_contextvars(request_id=request_id)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get configured logger."""
    return structlog.get_logger(name)
