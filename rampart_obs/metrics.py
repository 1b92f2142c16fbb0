"""
Prometheus Metrics Registration.

Custom metrics for enforcement outcomes.
"""

from prometheus_client import Counter, Histogram

# ============================================================================
# COUNTERS
# ============================================================================

actions_total = Counter(
    "rampart_actions_total",
    "Coordinated actions by final enforcement state",
    ["status"],
)

violations_total = Counter(
    "rampart_violations_total", "Violations recorded", ["category", "severity"]
)

interventions_total = Counter(
    "rampart_interventions_total", "Interventions applied", ["action"]  # WARN .. HALT
)

rollback_transactions_total = Counter(
    "rampart_rollback_transactions_total",
    "Remediation rollback transactions",
    ["status"],  # ROLLED_BACK, FAILED, SKIPPED
)

# ============================================================================
# HISTOGRAMS
# ============================================================================

deviation_score = Histogram(
    "rampart_deviation_score",
    "Behavioral deviation score per execution step",
    buckets=(0.05, 0.1, 0.25, 0.4, 0.6, 0.8, 1.0),
)

coordinate_duration = Histogram(
    "rampart_coordinate_duration_seconds",
    "Complete enforcement pipeline duration",
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)
