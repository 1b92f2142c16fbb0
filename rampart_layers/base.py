"""Enforcement Layer Interface.

Every stage of the pipeline (pre-execution, in-process, post-execution,
intervention) takes the shared ActionContext and returns it.
"""

from typing import Any, Protocol

from rampart_core.event_bus import EnforcementEventBus
from rampart_core.models import ActionContext, Violation, ViolationCategory, ViolationSeverity
from rampart_obs import metrics
from rampart_obs.logging import get_logger


class EnforcementLayer(Protocol):
    """Layer interface."""

    name: str

    async def process(self, context: ActionContext) -> ActionContext:
        """Apply this layer to the context and return it."""
        ...


class BaseEnforcementLayer:
    """Shared plumbing: event bus access and violation publishing."""

    name = "BaseEnforcementLayer"

    def __init__(self, event_bus: EnforcementEventBus):
        self.event_bus = event_bus
        self.logger = get_logger(f"rampart_layers.{self.name}")

    def raise_violation(
        self,
        context: ActionContext,
        category: ViolationCategory,
        severity: ViolationSeverity,
        description: str,
        metadata: dict[str, Any] | None = None,
    ) -> Violation:
        """Record a new violation on the context and publish it."""
        violation = Violation(
            category=category,
            severity=severity,
            description=description,
            source_layer=self.name,
            metadata=metadata or {},
        )
        context.record_violation(violation)
        metrics.violations_total.labels(
            category=category.value, severity=severity.value
        ).inc()
        self.logger.warning(
            "violation_raised",
            action_id=context.action_id,
            category=category.value,
            severity=severity.value,
            description=description,
        )
        self.event_bus.emit_violation(context.action_id, violation)
        return violation
