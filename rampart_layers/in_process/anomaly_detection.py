"""Anomaly Detection Engine.

Composes the deviation scorer and the mitigation policy into one
per-step evaluation. Deciding (``evaluate``) is pure; paying the time
cost of the SLOW tier (``enforce_delay_if_needed``) is a separate
awaitable so decisions can be tested without waiting.
"""

import asyncio

from rampart_config.settings import Settings
from rampart_core.models import (
    ActionContext,
    AnomalyDetectionDecision,
    AnomalyToleranceThresholds,
    BehaviorVector,
    ExecutionStep,
    InProcessMonitorPolicy,
    MitigationAction,
)
from rampart_layers.in_process import deviation, mitigation


class AnomalyDetectionEngine:
    """Per-step behavioral anomaly evaluation."""

    def __init__(
        self,
        thresholds: AnomalyToleranceThresholds | None = None,
        action_delay_seconds: float = 0.25,
    ):
        self.thresholds = thresholds or AnomalyToleranceThresholds()
        self.action_delay_seconds = action_delay_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnomalyDetectionEngine":
        thresholds = AnomalyToleranceThresholds(
            warn=settings.ANOMALY_WARN_THRESHOLD,
            slow=settings.ANOMALY_SLOW_THRESHOLD,
            require_approval=settings.ANOMALY_REQUIRE_APPROVAL_THRESHOLD,
            halt=settings.ANOMALY_HALT_THRESHOLD,
        )
        return cls(thresholds, settings.ANOMALY_SLOW_DELAY_SECONDS)

    def evaluate(
        self,
        context: ActionContext,
        step: ExecutionStep,
        policy: InProcessMonitorPolicy,
    ) -> AnomalyDetectionDecision:
        """Score one step against the context's predicted behavior. Writes nothing."""
        predicted = context.predicted_behavior_vector or BehaviorVector.default()
        live = deviation.derive_live_vector(context.intent, step, policy)
        deviation_score = deviation.score(predicted, live)
        action, threshold = mitigation.resolve(deviation_score, self.thresholds)

        return AnomalyDetectionDecision(
            deviation_score=deviation_score,
            action=action,
            predicted=predicted,
            live=live,
            threshold=threshold,
        )

    async def enforce_delay_if_needed(self, action: MitigationAction) -> None:
        """Suspend the caller for the configured delay when action is SLOW."""
        if action != MitigationAction.SLOW:
            return
        await asyncio.sleep(self.action_delay_seconds)
