"""Deviation Scorer.

Derives a live BehaviorVector from one execution step and compares it to
the predicted vector. All functions here are pure.
"""

from rampart_core.models import (
    BehaviorVector,
    ExecutionStep,
    InProcessMonitorPolicy,
    clamp,
)

HIGH_IMPACT_INTENT_WORDS = ("delete", "drop", "exfiltrate", "disable", "override", "shutdown")

INTENT_SIMILARITY_FLOOR = 0.25
UNMATCHED_INTENT_RISK = 0.65
HIGH_IMPACT_INTENT_RISK = 1.0

_SENSITIVE_LEVELS = frozenset({"medium", "high"})


def score(predicted: BehaviorVector, live: BehaviorVector) -> float:
    """Mean absolute per-dimension difference, clamped to [0, 1]."""
    deltas = [abs(p - l) for p, l in zip(predicted.as_tuple(), live.as_tuple())]
    return clamp(sum(deltas) / len(deltas))


def _tokens(text: str) -> set[str]:
    return {token for token in text.lower().split() if len(token) > 3}


def intent_similarity(observed: str, declared: str) -> float:
    """
    Share of the declared intent's vocabulary that also appears in the observed intent.

    Only whitespace tokens longer than 3 characters count, compared
    case-insensitively. Normalized by the declared token count, so
    intent_similarity(a, b) and intent_similarity(b, a) usually differ.
    Returns 0 when either side has no qualifying tokens.
    """
    observed_tokens = _tokens(observed)
    declared_tokens = _tokens(declared)
    if not observed_tokens or not declared_tokens:
        return 0.0
    return len(observed_tokens & declared_tokens) / len(declared_tokens)


def intent_deviation_risk(observed: str, declared: str) -> float:
    observed = (observed or "").lower()
    if not observed:
        return 0.0
    if intent_similarity(observed, declared) >= INTENT_SIMILARITY_FLOOR:
        return 0.0
    if any(word in observed for word in HIGH_IMPACT_INTENT_WORDS):
        return HIGH_IMPACT_INTENT_RISK
    return UNMATCHED_INTENT_RISK


def _outside_ratio(used: set[str], allowed: set[str]) -> float:
    if not used:
        return 0.0
    return clamp(len(used - allowed) / len(used))


def _cooperative_instability(step: ExecutionStep, policy: InProcessMonitorPolicy) -> float:
    if not step.cooperative_signals:
        return 0.0
    values = []
    for signal in step.cooperative_signals:
        stability_deficit = max(0.0, policy.min_cooperative_stability - signal.stability_score)
        conflict_excess = 0.0
        if signal.conflict_score is not None:
            conflict_excess = max(0.0, signal.conflict_score - policy.max_cooperative_conflict)
        values.append(clamp(stability_deficit + conflict_excess))
    return clamp(sum(values) / len(values))


def derive_live_vector(
    declared_intent: str, step: ExecutionStep, policy: InProcessMonitorPolicy
) -> BehaviorVector:
    """Live risk vector for one step under the given monitor policy."""
    reads = [access for access in step.data_access if access.operation == "read"]
    total_reads = sum(access.record_count for access in reads)
    sensitive_reads = sum(
        access.record_count for access in reads if access.sensitivity in _SENSITIVE_LEVELS
    )

    return BehaviorVector(
        intent_deviation_risk=intent_deviation_risk(step.observed_intent, declared_intent),
        scope_drift_risk=_outside_ratio(step.authority_scope_used, policy.declared_authority_scope),
        api_novelty_risk=_outside_ratio(step.api_calls, policy.allowed_apis),
        sensitive_data_exposure_risk=(
            0.0 if total_reads == 0 else clamp(sensitive_reads / total_reads)
        ),
        cooperative_instability_risk=_cooperative_instability(step, policy),
        data_volume_risk=clamp(total_reads / max(1, policy.max_records_per_step)),
    )
