"""Enforcement data model.

Risk vectors, execution steps, policy thresholds, violations and the
per-action context shared by every enforcement layer. No enforcement logic
lives here.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Model(BaseModel):
    """Accepts both snake_case and camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# ENUMS
# ============================================================================


class EnforcementState(str, Enum):
    """Per-action state machine states."""

    PENDING = "PENDING"
    PRE_EXECUTION_FAILED = "PRE_EXECUTION_FAILED"
    SUSPENDED = "SUSPENDED"
    COMPLETED = "COMPLETED"
    AUDIT_PASSED = "AUDIT_PASSED"
    AUDIT_FAILED = "AUDIT_FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {
        EnforcementState.PRE_EXECUTION_FAILED,
        EnforcementState.SUSPENDED,
        EnforcementState.AUDIT_PASSED,
        EnforcementState.AUDIT_FAILED,
    }
)


class ViolationCategory(str, Enum):
    COMPLIANCE = "COMPLIANCE"
    SECURITY = "SECURITY"
    BEHAVIORAL_ANOMALY = "BEHAVIORAL_ANOMALY"
    SCOPE = "SCOPE"
    TRUST = "TRUST"


class ViolationSeverity(str, Enum):
    """Violation severity, totally ordered LOW < MEDIUM < HIGH < CRITICAL."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    # str comparisons would order these alphabetically
    def __lt__(self, other):
        if not isinstance(other, ViolationSeverity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, ViolationSeverity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, ViolationSeverity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, ViolationSeverity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_ORDER = (
    ViolationSeverity.LOW,
    ViolationSeverity.MEDIUM,
    ViolationSeverity.HIGH,
    ViolationSeverity.CRITICAL,
)


class MitigationAction(str, Enum):
    """Anomaly mitigation tiers, least to most severe."""

    NONE = "NONE"
    WARN = "WARN"
    SLOW = "SLOW"
    REQUIRE_APPROVAL = "REQUIRE_APPROVAL"
    HALT = "HALT"

    @property
    def severity_rank(self) -> int:
        return list(MitigationAction).index(self)


class RollbackStatus(str, Enum):
    ROLLED_BACK = "ROLLED_BACK"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


# ============================================================================
# BEHAVIOR MODEL
# ============================================================================


class BehaviorVector(_Model):
    """Six independent risk scores, each clamped to [0, 1]."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    intent_deviation_risk: float = 0.0
    scope_drift_risk: float = 0.0
    api_novelty_risk: float = 0.0
    sensitive_data_exposure_risk: float = 0.0
    cooperative_instability_risk: float = 0.0
    data_volume_risk: float = 0.0

    @field_validator("*")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp(float(value))

    @classmethod
    def default(cls) -> "BehaviorVector":
        """Baseline used when an action declares no predicted vector."""
        return cls(
            intent_deviation_risk=0.15,
            scope_drift_risk=0.15,
            api_novelty_risk=0.15,
            sensitive_data_exposure_risk=0.2,
            cooperative_instability_risk=0.15,
            data_volume_risk=0.25,
        )

    def as_tuple(self) -> tuple[float, ...]:
        return (
            self.intent_deviation_risk,
            self.scope_drift_risk,
            self.api_novelty_risk,
            self.sensitive_data_exposure_risk,
            self.cooperative_instability_risk,
            self.data_volume_risk,
        )


class DataAccess(_Model):
    operation: Literal["read", "write"]
    record_count: int = Field(default=0, ge=0)
    sensitivity: Literal["low", "medium", "high"] = "low"


class CooperativeSignal(_Model):
    stability_score: float
    conflict_score: float | None = None


class ExecutionStep(_Model):
    """One observed increment of in-process behavior."""

    observed_intent: str = ""
    authority_scope_used: set[str] = set()
    api_calls: set[str] = set()
    data_access: list[DataAccess] = []
    cooperative_signals: list[CooperativeSignal] = []


class InProcessMonitorPolicy(_Model):
    declared_authority_scope: set[str] = set()
    allowed_apis: set[str] = set()
    max_records_per_step: int = Field(default=1000, ge=1)
    min_cooperative_stability: float = 0.5
    max_cooperative_conflict: float = 0.5


class AnomalyToleranceThresholds(_Model):
    """Ascending cut points: warn <= slow <= require_approval <= halt."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    warn: float = Field(default=0.25, ge=0.0, le=1.0)
    slow: float = Field(default=0.40, ge=0.0, le=1.0)
    require_approval: float = Field(default=0.60, ge=0.0, le=1.0)
    halt: float = Field(default=0.80, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_ascending(self) -> "AnomalyToleranceThresholds":
        if not (self.warn <= self.slow <= self.require_approval <= self.halt):
            raise ValueError(
                "thresholds must ascend: warn <= slow <= require_approval <= halt"
            )
        return self


class AnomalyDetectionDecision(_Model):
    """Outcome of evaluating one execution step."""

    deviation_score: float
    action: MitigationAction
    predicted: BehaviorVector
    live: BehaviorVector
    threshold: float | None = None


# ============================================================================
# VIOLATIONS, INTERVENTIONS, REMEDIATION
# ============================================================================


class Violation(_Model):
    """Policy violation record. Immutable once created."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(default_factory=lambda: f"v-{uuid.uuid4().hex}")
    timestamp: datetime = Field(default_factory=utcnow)
    category: ViolationCategory
    severity: ViolationSeverity
    description: str
    source_layer: str
    metadata: dict[str, Any] = {}


class Intervention(_Model):
    action: MitigationAction
    score: float
    threshold: float | None = None
    timestamp: datetime = Field(default_factory=utcnow)
    violation_id: str | None = None
    source_layer: str = ""


class RollbackTransaction(_Model):
    transaction_id: str = Field(default_factory=lambda: f"tx-{uuid.uuid4().hex}")
    change: dict[str, Any]
    status: RollbackStatus
    error: str | None = None
    timestamp: datetime = Field(default_factory=utcnow)


class RemediationReport(_Model):
    rollback_transactions: list[RollbackTransaction] = []

    @property
    def rolled_back_count(self) -> int:
        return sum(1 for t in self.rollback_transactions if t.status == RollbackStatus.ROLLED_BACK)

    @property
    def failed_count(self) -> int:
        return sum(1 for t in self.rollback_transactions if t.status == RollbackStatus.FAILED)


# ============================================================================
# ACTION CONTEXT
# ============================================================================


class ActionContext(_Model):
    """
    The unit of work under enforcement.

    One live instance exists per in-flight action_id. Layers and event
    handlers receive it by reference and mutate it in place. Violations and
    interventions are only appended through record_violation and
    record_intervention.
    """

    action_id: str = Field(default_factory=lambda: f"act-{uuid.uuid4().hex}")
    agent_id: str
    intent: str
    params: dict[str, Any] = {}
    status: EnforcementState = EnforcementState.PENDING
    violations: list[Violation] = []
    interventions: list[Intervention] = []
    predicted_behavior_vector: BehaviorVector | None = None
    remediation_report: RemediationReport | None = None
    start_time: datetime = Field(default_factory=utcnow)
    end_time: datetime | None = None

    system_changes: list[Any] | None = None
    stakeholders: list[Any] | None = None
    trust_coefficient: float = 1.0

    anomaly_decisions: list[AnomalyDetectionDecision] = []
    suspension_reason: str | None = None

    @classmethod
    def propose(cls, agent_id: str, intent: str, params: dict[str, Any]) -> "ActionContext":
        """Build a PENDING context, lifting the optional fields out of params."""
        trust = params.get("trustCoefficient")
        predicted = params.get("predictedBehaviorVector")
        return cls(
            agent_id=agent_id,
            intent=intent,
            params=params,
            system_changes=params["systemChanges"] if isinstance(params.get("systemChanges"), list) else None,
            stakeholders=params["stakeholders"] if isinstance(params.get("stakeholders"), list) else None,
            trust_coefficient=(
                float(trust) if isinstance(trust, (int, float)) and not isinstance(trust, bool) else 1.0
            ),
            predicted_behavior_vector=(
                BehaviorVector.model_validate(predicted) if isinstance(predicted, dict) else None
            ),
        )

    def has_violation(self, violation_id: str) -> bool:
        return any(v.id == violation_id for v in self.violations)

    def record_violation(self, violation: Violation) -> bool:
        """Append unless already present. Returns True when appended."""
        if self.has_violation(violation.id):
            return False
        self.violations.append(violation)
        return True

    def record_intervention(self, intervention: Intervention) -> None:
        self.interventions.append(intervention)

    def has_critical_violation(self) -> bool:
        return any(v.severity == ViolationSeverity.CRITICAL for v in self.violations)


class ViolationEvent(_Model):
    """Payload of the violation-detected event."""

    action_id: str
    violation: Violation
