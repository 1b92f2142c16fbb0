"""
Rampart Core Package.

Behavior model (pydantic records) and the enforcement event bus.
"""

from rampart_core.event_bus import EnforcementEvent, EnforcementEventBus
from rampart_core.models import (
    ActionContext,
    AnomalyDetectionDecision,
    AnomalyToleranceThresholds,
    BehaviorVector,
    EnforcementState,
    ExecutionStep,
    InProcessMonitorPolicy,
    Intervention,
    MitigationAction,
    RemediationReport,
    RollbackStatus,
    RollbackTransaction,
    Violation,
    ViolationCategory,
    ViolationEvent,
    ViolationSeverity,
)

__all__ = [
    "ActionContext",
    "AnomalyDetectionDecision",
    "AnomalyToleranceThresholds",
    "BehaviorVector",
    "EnforcementEvent",
    "EnforcementEventBus",
    "EnforcementState",
    "ExecutionStep",
    "InProcessMonitorPolicy",
    "Intervention",
    "MitigationAction",
    "RemediationReport",
    "RollbackStatus",
    "RollbackTransaction",
    "Violation",
    "ViolationCategory",
    "ViolationEvent",
    "ViolationSeverity",
]
