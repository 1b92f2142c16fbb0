"""Enforcement Event Bus.

Publish/subscribe channel for action lifecycle and violation events.

One bus is constructed at process start (see apps.core_api.main lifespan)
and passed by reference to the orchestrator and every layer; ``clear()``
tears it down at shutdown.

Delivery is synchronous, in registration order. A handler that returns an
awaitable has it scheduled as a task on the running loop, so async
handlers run concurrently with the publisher rather than blocking it.
"""

import asyncio
import inspect
from collections import defaultdict
from enum import Enum
from typing import Any, Awaitable, Callable

from rampart_core.models import Violation, ViolationEvent
from rampart_obs.logging import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[Any], Awaitable[None] | None]


class EnforcementEvent(str, Enum):
    """Event taxonomy."""

    ACTION_PROPOSED = "action.proposed"
    ACTION_COMPLETED = "action.completed"
    VIOLATION_DETECTED = "violation.detected"
    REMEDIATION_TRIGGERED = "remediation.triggered"
    REMEDIATION_COMPLETED = "remediation.completed"
    AUDIT_STARTED = "audit.started"
    AUDIT_COMPLETED = "audit.completed"


class EnforcementEventBus:
    """In-process event dispatcher."""

    def __init__(self):
        self._handlers: dict[EnforcementEvent, list[EventHandler]] = defaultdict(list)
        self._pending: set[asyncio.Task] = set()

    def on(self, event: EnforcementEvent, handler: EventHandler) -> None:
        """Register a handler, invoked once per publish of event."""
        self._handlers[event].append(handler)

    def off(self, event: EnforcementEvent, handler: EventHandler) -> None:
        """Unregister a handler (no-op if not registered)."""
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: EnforcementEvent, payload: Any) -> None:
        """Deliver payload to every handler registered for event."""
        for handler in list(self._handlers.get(event, ())):
            result = handler(payload)
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._pending.add(task)
                task.add_done_callback(self._on_task_done)

    def emit_violation(self, action_id: str, violation: Violation) -> None:
        self.emit(
            EnforcementEvent.VIOLATION_DETECTED,
            ViolationEvent(action_id=action_id, violation=violation),
        )

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait until every scheduled handler task (including ones they schedule) finishes."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def clear(self) -> None:
        """Drop all handlers."""
        self._handlers.clear()

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "event_handler_failed",
                error=str(exc),
                exc_info=(type(exc), exc, exc.__traceback__),
            )
