"""In-Process Monitoring Layer.

Runs every observed execution step through the anomaly detection engine,
turns non-NONE decisions into violations, pays the SLOW delay and
suspends the action on HALT or an unapproved REQUIRE_APPROVAL.
"""

from typing import Any

from pydantic import ValidationError

from rampart_config.settings import Settings
from rampart_core.event_bus import EnforcementEventBus
from rampart_core.models import (
    ActionContext,
    AnomalyDetectionDecision,
    EnforcementState,
    ExecutionStep,
    InProcessMonitorPolicy,
    MitigationAction,
    ViolationCategory,
    ViolationSeverity,
)
from rampart_layers.base import BaseEnforcementLayer
from rampart_layers.in_process.anomaly_detection import AnomalyDetectionEngine
from rampart_obs import metrics

ACTION_SEVERITY = {
    MitigationAction.WARN: ViolationSeverity.LOW,
    MitigationAction.SLOW: ViolationSeverity.MEDIUM,
    MitigationAction.REQUIRE_APPROVAL: ViolationSeverity.HIGH,
    MitigationAction.HALT: ViolationSeverity.CRITICAL,
}


class InProcessLayer(BaseEnforcementLayer):
    name = "InProcessMonitoring"

    def __init__(
        self,
        event_bus: EnforcementEventBus,
        settings: Settings,
        engine: AnomalyDetectionEngine | None = None,
    ):
        super().__init__(event_bus)
        self.settings = settings
        self.engine = engine or AnomalyDetectionEngine.from_settings(settings)

    async def process(self, context: ActionContext) -> ActionContext:
        policy = self._monitor_policy(context)
        steps = self._execution_steps(context)

        self.logger.info(
            "in_process_monitoring_started",
            action_id=context.action_id,
            steps=len(steps),
        )

        for index, step in enumerate(steps):
            decision = self.engine.evaluate(context, step, policy)
            context.anomaly_decisions.append(decision)
            metrics.deviation_score.observe(decision.deviation_score)

            if decision.action != MitigationAction.NONE:
                self._raise_anomaly(context, decision, index)

            await self.engine.enforce_delay_if_needed(decision.action)

            if decision.action == MitigationAction.HALT:
                return self._suspend(context, "halt")
            if decision.action == MitigationAction.REQUIRE_APPROVAL and not context.params.get(
                "approvalGranted"
            ):
                return self._suspend(context, "approval_required")
            if (
                self.settings.CRITICAL_VIOLATION_POLICY == "suspend"
                and context.has_critical_violation()
            ):
                return self._suspend(context, "critical_violation")

        return context

    def _raise_anomaly(
        self, context: ActionContext, decision: AnomalyDetectionDecision, step_index: int
    ) -> None:
        self.raise_violation(
            context,
            ViolationCategory.BEHAVIORAL_ANOMALY,
            ACTION_SEVERITY[decision.action],
            f"Behavior deviated from prediction (score {decision.deviation_score:.3f}, "
            f"mitigation {decision.action.value}).",
            metadata={
                "deviationScore": decision.deviation_score,
                "threshold": decision.threshold,
                "mitigation": decision.action.value,
                "stepIndex": step_index,
                "predicted": decision.predicted.model_dump(by_alias=True),
                "live": decision.live.model_dump(by_alias=True),
            },
        )

    def _suspend(self, context: ActionContext, reason: str) -> ActionContext:
        context.status = EnforcementState.SUSPENDED
        context.suspension_reason = reason
        self.logger.warning("action_suspended", action_id=context.action_id, reason=reason)
        return context

    def _monitor_policy(self, context: ActionContext) -> InProcessMonitorPolicy:
        defaults: dict[str, Any] = {
            "max_records_per_step": self.settings.MAX_RECORDS_PER_STEP,
            "min_cooperative_stability": self.settings.MIN_COOPERATIVE_STABILITY,
            "max_cooperative_conflict": self.settings.MAX_COOPERATIVE_CONFLICT,
        }
        raw = context.params.get("monitorPolicy")
        if isinstance(raw, InProcessMonitorPolicy):
            return raw
        if isinstance(raw, dict):
            try:
                policy = InProcessMonitorPolicy.model_validate(raw)
                unset = {k: v for k, v in defaults.items() if k not in policy.model_fields_set}
                return policy.model_copy(update=unset)
            except ValidationError as e:
                self.logger.warning(
                    "monitor_policy_invalid", action_id=context.action_id, error=str(e)
                )
        return InProcessMonitorPolicy(**defaults)

    def _execution_steps(self, context: ActionContext) -> list[ExecutionStep]:
        raw_steps = context.params.get("executionSteps")
        if not isinstance(raw_steps, list):
            return []

        steps = []
        for index, raw in enumerate(raw_steps):
            if isinstance(raw, ExecutionStep):
                steps.append(raw)
                continue
            try:
                steps.append(ExecutionStep.model_validate(raw))
            except ValidationError as e:
                self.logger.warning(
                    "execution_step_invalid",
                    action_id=context.action_id,
                    step_index=index,
                    error=str(e),
                )
        return steps
