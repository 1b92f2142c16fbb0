"""Post-Execution Auditing Tests."""

from unittest.mock import AsyncMock

import pytest

from rampart_core.event_bus import EnforcementEvent
from rampart_core.models import (
    EnforcementState,
    RemediationReport,
    RollbackStatus,
    RollbackTransaction,
    Violation,
    ViolationCategory,
    ViolationSeverity,
)
from rampart_layers.post_execution import PostExecutionLayer

AUDIT_EVENTS = {
    EnforcementEvent.AUDIT_STARTED,
    EnforcementEvent.AUDIT_COMPLETED,
    EnforcementEvent.REMEDIATION_TRIGGERED,
    EnforcementEvent.REMEDIATION_COMPLETED,
}


@pytest.fixture
def remediation():
    engine = AsyncMock()
    engine.remediate.return_value = RemediationReport(
        rollback_transactions=[
            RollbackTransaction(change={"type": "config"}, status=RollbackStatus.ROLLED_BACK)
        ]
    )
    return engine


@pytest.fixture
def layer(event_bus, remediation):
    return PostExecutionLayer(event_bus, remediation)


def _audit_events(recorder):
    return [name for name in recorder.names if name in AUDIT_EVENTS]


@pytest.mark.asyncio
async def test_clean_action_passes_audit(layer, remediation, make_context, recorder):
    context = make_context()
    context.status = EnforcementState.COMPLETED

    await layer.process(context)

    assert context.status == EnforcementState.AUDIT_PASSED
    assert context.remediation_report is None
    remediation.remediate.assert_not_awaited()
    assert _audit_events(recorder) == [
        EnforcementEvent.AUDIT_STARTED,
        EnforcementEvent.AUDIT_COMPLETED,
    ]


@pytest.mark.asyncio
async def test_critical_violation_fails_audit_and_remediates(
    layer, remediation, make_context, recorder
):
    context = make_context()
    context.record_violation(
        Violation(
            category=ViolationCategory.SECURITY,
            severity=ViolationSeverity.CRITICAL,
            description="earlier",
            source_layer="test",
        )
    )

    await layer.process(context)

    assert context.status == EnforcementState.AUDIT_FAILED
    remediation.remediate.assert_awaited_once_with(context)
    assert context.remediation_report.rolled_back_count == 1

    audit_violation = context.violations[-1]
    assert audit_violation.description == "Final result fails compliance audit."
    assert audit_violation.severity == ViolationSeverity.CRITICAL
    assert audit_violation.source_layer == "PostExecutionAuditing"

    assert _audit_events(recorder) == [
        EnforcementEvent.AUDIT_STARTED,
        EnforcementEvent.REMEDIATION_TRIGGERED,
        EnforcementEvent.REMEDIATION_COMPLETED,
        EnforcementEvent.AUDIT_COMPLETED,
    ]


@pytest.mark.asyncio
async def test_report_attached_before_audit_completed(layer, make_context, recorder):
    await layer.process(make_context(invalidResult=True))

    assert recorder.report_attached_at[EnforcementEvent.REMEDIATION_TRIGGERED] is False
    assert recorder.report_attached_at[EnforcementEvent.REMEDIATION_COMPLETED] is True
    assert recorder.report_attached_at[EnforcementEvent.AUDIT_COMPLETED] is True


@pytest.mark.asyncio
async def test_invalid_result_fails_audit(layer, make_context):
    context = await layer.process(make_context(invalidResult="schema mismatch"))

    assert context.status == EnforcementState.AUDIT_FAILED
    assert context.violations[-1].metadata["invalidResult"] == "schema mismatch"


@pytest.mark.asyncio
async def test_non_critical_violations_pass_audit(layer, make_context):
    context = make_context()
    context.record_violation(
        Violation(
            category=ViolationCategory.BEHAVIORAL_ANOMALY,
            severity=ViolationSeverity.HIGH,
            description="approval",
            source_layer="test",
        )
    )

    await layer.process(context)

    assert context.status == EnforcementState.AUDIT_PASSED


@pytest.mark.asyncio
async def test_default_engine_rolls_back_nothing_without_handlers(event_bus, make_context):
    layer = PostExecutionLayer(event_bus)

    context = await layer.process(
        make_context(invalidResult=True, systemChanges=[{"type": "config", "target": "x"}])
    )

    [transaction] = context.remediation_report.rollback_transactions
    assert transaction.status == RollbackStatus.SKIPPED
