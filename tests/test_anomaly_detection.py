"""Anomaly Detection Engine Tests."""

from unittest.mock import AsyncMock, patch

import pytest

from rampart_core.models import (
    AnomalyToleranceThresholds,
    BehaviorVector,
    ExecutionStep,
    InProcessMonitorPolicy,
    MitigationAction,
)
from rampart_layers.in_process.anomaly_detection import AnomalyDetectionEngine


@pytest.fixture
def engine():
    return AnomalyDetectionEngine()


def test_default_predicted_vector_with_matching_live_is_none(engine, make_context):
    """Predicted baseline equal to the live vector deviates by zero."""
    context = make_context()
    context.predicted_behavior_vector = BehaviorVector()

    decision = engine.evaluate(context, ExecutionStep(), InProcessMonitorPolicy())

    assert decision.deviation_score == 0.0
    assert decision.action == MitigationAction.NONE
    assert decision.threshold is None


def test_missing_prediction_uses_default_baseline(engine, make_context):
    decision = engine.evaluate(make_context(), ExecutionStep(), InProcessMonitorPolicy())

    assert decision.predicted == BehaviorVector.default()
    assert decision.live == BehaviorVector()
    # 0.15 + 0.15 + 0.15 + 0.2 + 0.15 + 0.25 over six dimensions
    assert decision.deviation_score == pytest.approx(1.05 / 6)
    assert decision.action == MitigationAction.NONE


def test_single_novel_api_dimension_does_not_escalate(engine, make_context):
    """Three unapproved API calls max one dimension but stay below warn."""
    context = make_context()
    context.predicted_behavior_vector = BehaviorVector()
    step = ExecutionStep(api_calls={"s3.list", "s3.get", "s3.put"})

    decision = engine.evaluate(context, step, InProcessMonitorPolicy(allowed_apis={"crm.list"}))

    assert decision.live.api_novelty_risk == 1.0
    assert decision.deviation_score == pytest.approx(1 / 6)
    assert decision.action == MitigationAction.NONE


def test_destructive_intent_against_default_baseline_warns(engine, make_context):
    """Observed destructive intent unrelated to the declared one."""
    context = make_context(intent="generate report")
    step = ExecutionStep(observed_intent="delete all production records")

    decision = engine.evaluate(context, step, InProcessMonitorPolicy())

    assert decision.live.intent_deviation_risk == 1.0
    # |0.15 - 1| + 0.15 + 0.15 + 0.2 + 0.15 + 0.25
    assert decision.deviation_score == pytest.approx(1.75 / 6)
    assert decision.action == MitigationAction.WARN
    assert decision.threshold == 0.25


def test_evaluate_does_not_mutate_context(engine, make_context):
    context = make_context()
    before = context.model_dump()

    engine.evaluate(context, ExecutionStep(observed_intent="drop tables"), InProcessMonitorPolicy())

    assert context.model_dump() == before


def test_engine_uses_custom_thresholds(make_context):
    engine = AnomalyDetectionEngine(
        AnomalyToleranceThresholds(warn=0.05, slow=0.1, require_approval=0.15, halt=0.2)
    )
    decision = engine.evaluate(make_context(), ExecutionStep(), InProcessMonitorPolicy())
    assert decision.action == MitigationAction.REQUIRE_APPROVAL


def test_from_settings(settings):
    engine = AnomalyDetectionEngine.from_settings(settings)
    assert engine.thresholds.halt == settings.ANOMALY_HALT_THRESHOLD
    assert engine.action_delay_seconds == settings.ANOMALY_SLOW_DELAY_SECONDS


@pytest.mark.asyncio
async def test_enforce_delay_sleeps_only_for_slow():
    engine = AnomalyDetectionEngine(action_delay_seconds=0.3)

    with patch(
        "rampart_layers.in_process.anomaly_detection.asyncio.sleep", new_callable=AsyncMock
    ) as sleep:
        for action in MitigationAction:
            await engine.enforce_delay_if_needed(action)

    sleep.assert_awaited_once_with(0.3)
