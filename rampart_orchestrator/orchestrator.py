"""Guardrail Orchestrator.

Owns the per-action state machine:

    PENDING -> PRE_EXECUTION_FAILED
            -> SUSPENDED
            -> COMPLETED -> AUDIT_PASSED | AUDIT_FAILED

Stages run strictly in order (pre-execution, in-process, simulated
execution, post-execution) and never move backward. Violations published
on the bus for an in-flight action are handled inside the publish call:
the handler records the violation and runs adaptive intervention on the
same context object before control returns to the publishing stage.
"""

import asyncio
import time
from typing import Any

from rampart_config.settings import Settings
from rampart_core.event_bus import EnforcementEvent, EnforcementEventBus
from rampart_core.models import (
    ActionContext,
    EnforcementState,
    ViolationEvent,
    ViolationSeverity,
    utcnow,
)
from rampart_layers.base import EnforcementLayer
from rampart_layers.in_process.layer import InProcessLayer
from rampart_layers.intervention.layer import AdaptiveInterventionLayer
from rampart_layers.post_execution.layer import PostExecutionLayer
from rampart_layers.pre_execution.layer import PreExecutionLayer
from rampart_obs import metrics
from rampart_obs.logging import bind_action, get_logger
from rampart_obs.tracing import get_tracer

logger = get_logger(__name__)


class GuardrailOrchestrator:
    """Coordinates enforcement layers for every proposed agent action."""

    def __init__(
        self,
        event_bus: EnforcementEventBus,
        settings: Settings | None = None,
        pre_execution: EnforcementLayer | None = None,
        in_process: EnforcementLayer | None = None,
        post_execution: EnforcementLayer | None = None,
        intervention: AdaptiveInterventionLayer | None = None,
    ):
        """
        Initialize orchestrator.

        Args:
            event_bus: Bus shared with every layer
            settings: Application settings (defaults loaded from env)
            pre_execution: Declarative pre-execution layer
            in_process: Behavioral monitoring layer
            post_execution: Result auditing layer
            intervention: Layer run on every violation for an in-flight action
        """
        self.event_bus = event_bus
        self.settings = settings or Settings()
        self.pre_execution = pre_execution or PreExecutionLayer(event_bus, self.settings)
        self.in_process = in_process or InProcessLayer(event_bus, self.settings)
        self.post_execution = post_execution or PostExecutionLayer(event_bus)
        self.intervention = intervention or AdaptiveInterventionLayer(event_bus, self.settings)
        self.tracer = get_tracer(__name__)

        self._active_actions: dict[str, ActionContext] = {}
        self._subscriptions = [
            (EnforcementEvent.VIOLATION_DETECTED, self._on_violation),
            (EnforcementEvent.REMEDIATION_TRIGGERED, self._on_remediation_triggered),
            (EnforcementEvent.REMEDIATION_COMPLETED, self._on_remediation_completed),
        ]
        for event, handler in self._subscriptions:
            self.event_bus.on(event, handler)

    @property
    def active_action_ids(self) -> frozenset[str]:
        return frozenset(self._active_actions)

    def get_active(self, action_id: str) -> ActionContext | None:
        return self._active_actions.get(action_id)

    def close(self) -> None:
        """Detach from the event bus."""
        for event, handler in self._subscriptions:
            self.event_bus.off(event, handler)

    async def coordinate(
        self, agent_id: str, intent: str, params: dict[str, Any] | None = None
    ) -> ActionContext:
        """
        Run one proposed action through every enforcement stage.

        Returns the context in whatever state the pipeline stopped at. The
        action is removed from the active set on every exit path.
        """
        context = ActionContext.propose(agent_id, intent, params or {})
        action_id = context.action_id
        started = time.perf_counter()

        with bind_action(action_id, agent_id):
            self._active_actions[action_id] = context
            self.event_bus.emit(EnforcementEvent.ACTION_PROPOSED, context)
            logger.info("action_proposed", intent=intent)

            try:
                with self.tracer.start_as_current_span("rampart.coordinate") as span:
                    span.set_attribute("rampart.action_id", action_id)
                    span.set_attribute("rampart.agent_id", agent_id)

                    # Pre-execution can only end in PRE_EXECUTION_FAILED; in-process in SUSPENDED.
                    context = await self._run_stage(self.pre_execution, context)
                    if context.status.is_terminal:
                        return context

                    context = await self._run_stage(self.in_process, context)
                    if context.status.is_terminal:
                        context.end_time = utcnow()
                        return context

                    await asyncio.sleep(self.settings.EXECUTION_SIMULATION_SECONDS)

                    context.end_time = utcnow()
                    context.status = EnforcementState.COMPLETED
                    self.event_bus.emit(EnforcementEvent.ACTION_COMPLETED, context)

                    context = await self._run_stage(self.post_execution, context)
                    return context
            except Exception:
                logger.error("coordinate_failed", exc_info=True)
                raise
            finally:
                self._active_actions.pop(action_id, None)
                metrics.actions_total.labels(status=context.status.value).inc()
                metrics.coordinate_duration.observe(time.perf_counter() - started)
                logger.info("action_finished", status=context.status.value)

    async def _run_stage(self, layer: EnforcementLayer, context: ActionContext) -> ActionContext:
        with self.tracer.start_as_current_span(f"rampart.{layer.name}") as span:
            context = await layer.process(context)
            span.set_attribute("rampart.status", context.status.value)
            return context

    # ========================================================================
    # EVENT HANDLERS
    # ========================================================================

    def _on_violation(self, event: ViolationEvent) -> None:
        # Runs inside emit: the publisher sees the intervention as soon as emit returns.
        context = self._active_actions.get(event.action_id)
        if context is None:
            return

        violation = event.violation
        logger.warning(
            "violation_detected",
            action_id=context.action_id,
            description=violation.description,
            severity=violation.severity.value,
        )
        context.record_violation(violation)
        self.intervention.apply(context)

        if violation.severity == ViolationSeverity.CRITICAL:
            logger.error(
                "critical_violation",
                action_id=context.action_id,
                violation_id=violation.id,
                status=context.status.value,
            )

    def _on_remediation_triggered(self, context: ActionContext) -> None:
        logger.info("remediation_in_progress", action_id=context.action_id)

    def _on_remediation_completed(self, context: ActionContext) -> None:
        report = context.remediation_report
        logger.info(
            "remediation_completed",
            action_id=context.action_id,
            rollback_transactions=len(report.rollback_transactions) if report else 0,
        )
