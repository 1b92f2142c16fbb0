"""Deviation Scorer Tests."""

import itertools

import pytest

from rampart_core.models import BehaviorVector, ExecutionStep, InProcessMonitorPolicy
from rampart_layers.in_process import deviation

DEFAULT = BehaviorVector.default()


def _with(vector: BehaviorVector, **overrides) -> BehaviorVector:
    return BehaviorVector(**{**vector.model_dump(), **overrides})


# ============================================================================
# SCORE
# ============================================================================


def test_score_identical_vectors_is_zero():
    """Default baseline against itself deviates by nothing."""
    assert deviation.score(DEFAULT, DEFAULT) == 0.0


def test_score_stays_within_unit_interval():
    """Score is in [0, 1] for extreme and mixed vectors."""
    corners = [0.0, 0.5, 1.0]
    for a, b in itertools.product(corners, repeat=2):
        predicted = BehaviorVector(**{f: a for f in BehaviorVector.model_fields})
        live = BehaviorVector(**{f: b for f in BehaviorVector.model_fields})
        assert 0.0 <= deviation.score(predicted, live) <= 1.0

    assert deviation.score(BehaviorVector(), _with(BehaviorVector(), data_volume_risk=1.0)) == pytest.approx(1 / 6)


def test_score_one_maxed_dimension_is_mean_delta():
    """A single maxed dimension contributes (1 - baseline) / 6."""
    live = _with(DEFAULT, api_novelty_risk=1.0)
    assert deviation.score(DEFAULT, live) == pytest.approx((1 - 0.15) / 6)


def test_behavior_vector_clamps_out_of_range_values():
    vector = BehaviorVector(intent_deviation_risk=1.7, scope_drift_risk=-0.2)
    assert vector.intent_deviation_risk == 1.0
    assert vector.scope_drift_risk == 0.0


# ============================================================================
# INTENT SIMILARITY
# ============================================================================


def test_intent_similarity_is_asymmetric():
    """Similarity is normalized by the declared vocabulary."""
    longer = "generate the quarterly report now"
    shorter = "generate report"

    assert deviation.intent_similarity(longer, shorter) == pytest.approx(1.0)
    assert deviation.intent_similarity(shorter, longer) == pytest.approx(2 / 3)


def test_intent_similarity_ignores_short_tokens_and_case():
    assert deviation.intent_similarity("GENERATE Report", "generate report") == 1.0
    assert deviation.intent_similarity("do it now", "generate report") == 0.0
    assert deviation.intent_similarity("generate report", "do it") == 0.0


def test_intent_risk_empty_observed_intent_is_zero():
    assert deviation.intent_deviation_risk("", "generate report") == 0.0


def test_intent_risk_high_impact_verb():
    assert deviation.intent_deviation_risk("delete all production records", "generate report") == 1.0


def test_intent_risk_unmatched_without_high_impact_verb():
    assert deviation.intent_deviation_risk("summarize customer feedback", "generate report") == 0.65


def test_intent_risk_matching_intent_overrides_verb():
    """Enough overlap with the declared intent wins over a high-impact verb."""
    assert deviation.intent_deviation_risk("delete stale report drafts", "archive stale report") == 0.0


# ============================================================================
# LIVE VECTOR
# ============================================================================


def test_live_vector_empty_step_zeroes_every_dimension():
    """No scopes, APIs, reads, signals or intent: every risk is zero regardless of policy."""
    strict = InProcessMonitorPolicy(max_records_per_step=1, min_cooperative_stability=1.0)
    live = deviation.derive_live_vector("generate report", ExecutionStep(), strict)

    assert live.scope_drift_risk == 0.0
    assert live.api_novelty_risk == 0.0
    assert live.sensitive_data_exposure_risk == 0.0
    assert live.data_volume_risk == 0.0
    assert live.cooperative_instability_risk == 0.0
    assert live.intent_deviation_risk == 0.0


def test_live_vector_scope_and_api_ratios():
    step = ExecutionStep(
        authority_scope_used={"crm:read", "crm:write", "billing:write", "iam:admin"},
        api_calls={"crm.list", "crm.update", "billing.refund"},
    )
    policy = InProcessMonitorPolicy(
        declared_authority_scope={"crm:read"},
        allowed_apis={"crm.list", "crm.update"},
    )
    live = deviation.derive_live_vector("update crm", step, policy)

    assert live.scope_drift_risk == pytest.approx(0.75)
    assert live.api_novelty_risk == pytest.approx(1 / 3)


def test_live_vector_counts_only_reads_for_exposure_and_volume():
    step = ExecutionStep.model_validate(
        {
            "dataAccess": [
                {"operation": "read", "recordCount": 100, "sensitivity": "low"},
                {"operation": "read", "recordCount": 50, "sensitivity": "high"},
                {"operation": "read", "recordCount": 50, "sensitivity": "medium"},
                {"operation": "write", "recordCount": 1000, "sensitivity": "high"},
            ]
        }
    )
    live = deviation.derive_live_vector("x", step, InProcessMonitorPolicy(max_records_per_step=400))

    assert live.sensitive_data_exposure_risk == pytest.approx(0.5)
    assert live.data_volume_risk == pytest.approx(0.5)


def test_live_vector_data_volume_saturates():
    step = ExecutionStep.model_validate({"dataAccess": [{"operation": "read", "recordCount": 5000}]})
    live = deviation.derive_live_vector("x", step, InProcessMonitorPolicy(max_records_per_step=100))
    assert live.data_volume_risk == 1.0


def test_live_vector_writes_only_is_zero_exposure():
    step = ExecutionStep.model_validate(
        {"dataAccess": [{"operation": "write", "recordCount": 10, "sensitivity": "high"}]}
    )
    live = deviation.derive_live_vector("x", step, InProcessMonitorPolicy())
    assert live.sensitive_data_exposure_risk == 0.0
    assert live.data_volume_risk == 0.0


def test_live_vector_cooperative_instability_is_mean_over_signals():
    step = ExecutionStep.model_validate(
        {
            "cooperativeSignals": [
                {"stabilityScore": 0.3, "conflictScore": 0.7},
                {"stabilityScore": 0.9},
            ]
        }
    )
    policy = InProcessMonitorPolicy(min_cooperative_stability=0.5, max_cooperative_conflict=0.5)
    live = deviation.derive_live_vector("x", step, policy)

    # (0.2 deficit + 0.2 excess) and 0, averaged
    assert live.cooperative_instability_risk == pytest.approx(0.2)
