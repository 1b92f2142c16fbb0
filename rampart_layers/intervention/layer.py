"""Adaptive Intervention Layer.

Decides and records a mitigation for every violation on the context that
has not been answered yet. Anomaly violations carry their own deviation
score; everything else is scored from its severity, raised by low trust.
Recording an intervention never changes the action's state.
"""

from rampart_config.settings import Settings
from rampart_core.event_bus import EnforcementEventBus
from rampart_core.models import (
    ActionContext,
    AnomalyToleranceThresholds,
    Intervention,
    MitigationAction,
    Violation,
    ViolationSeverity,
    clamp,
)
from rampart_layers.base import BaseEnforcementLayer
from rampart_layers.in_process import mitigation
from rampart_obs import metrics

SEVERITY_WEIGHTS = {
    ViolationSeverity.LOW: 0.3,
    ViolationSeverity.MEDIUM: 0.5,
    ViolationSeverity.HIGH: 0.7,
    ViolationSeverity.CRITICAL: 0.9,
}


class AdaptiveInterventionLayer(BaseEnforcementLayer):
    name = "AdaptiveIntervention"

    def __init__(
        self,
        event_bus: EnforcementEventBus,
        settings: Settings,
        thresholds: AnomalyToleranceThresholds | None = None,
    ):
        super().__init__(event_bus)
        self.settings = settings
        self.thresholds = thresholds or AnomalyToleranceThresholds(
            warn=settings.ANOMALY_WARN_THRESHOLD,
            slow=settings.ANOMALY_SLOW_THRESHOLD,
            require_approval=settings.ANOMALY_REQUIRE_APPROVAL_THRESHOLD,
            halt=settings.ANOMALY_HALT_THRESHOLD,
        )

    async def process(self, context: ActionContext) -> ActionContext:
        return self.apply(context)

    def apply(self, context: ActionContext) -> ActionContext:
        """Answer every unanswered violation without yielding to the event loop."""
        answered = {i.violation_id for i in context.interventions}
        for violation in list(context.violations):
            if violation.id in answered:
                continue
            self._intervene(context, violation)
        return context

    def score(self, context: ActionContext, violation: Violation) -> float:
        deviation_score = violation.metadata.get("deviationScore")
        if isinstance(deviation_score, (int, float)):
            return clamp(float(deviation_score))
        trust_penalty = (1.0 - context.trust_coefficient) * self.settings.TRUST_PENALTY_WEIGHT
        return clamp(SEVERITY_WEIGHTS[violation.severity] + trust_penalty)

    def _intervene(self, context: ActionContext, violation: Violation) -> None:
        score = self.score(context, violation)
        action, threshold = mitigation.resolve(score, self.thresholds)
        if action == MitigationAction.NONE:
            return

        context.record_intervention(
            Intervention(
                action=action,
                score=score,
                threshold=threshold,
                violation_id=violation.id,
                source_layer=self.name,
            )
        )
        metrics.interventions_total.labels(action=action.value).inc()
        self.logger.info(
            "intervention_applied",
            action_id=context.action_id,
            violation_id=violation.id,
            mitigation=action.value,
            score=round(score, 4),
        )
