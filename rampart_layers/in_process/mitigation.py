"""Mitigation Policy.

Maps a deviation score onto a mitigation tier. Tiers are checked from
most to least severe and a score equal to a cut point escalates to that
cut point's tier.
"""

from typing import NamedTuple

from rampart_core.models import AnomalyToleranceThresholds, MitigationAction


class MitigationDecision(NamedTuple):
    action: MitigationAction
    threshold_crossed: float | None


def resolve(score: float, thresholds: AnomalyToleranceThresholds) -> MitigationDecision:
    """Resolve the mitigation action for score."""
    tiers = (
        (MitigationAction.HALT, thresholds.halt),
        (MitigationAction.REQUIRE_APPROVAL, thresholds.require_approval),
        (MitigationAction.SLOW, thresholds.slow),
        (MitigationAction.WARN, thresholds.warn),
    )
    for action, cut_point in tiers:
        if score >= cut_point:
            return MitigationDecision(action, cut_point)
    return MitigationDecision(MitigationAction.NONE, None)
