"""Post-Execution Auditing Layer.

Fails the audit when the action carries a CRITICAL violation or the
caller flagged the result as invalid; a failed audit triggers automatic
remediation before ``audit completed`` is published.
"""

from rampart_core.event_bus import EnforcementEvent, EnforcementEventBus
from rampart_core.models import (
    ActionContext,
    EnforcementState,
    ViolationCategory,
    ViolationSeverity,
)
from rampart_layers.base import BaseEnforcementLayer
from rampart_layers.remediation.engine import RemediationEngine, RollbackRemediationEngine


class PostExecutionLayer(BaseEnforcementLayer):
    name = "PostExecutionAuditing"

    def __init__(
        self,
        event_bus: EnforcementEventBus,
        remediation_engine: RemediationEngine | None = None,
    ):
        super().__init__(event_bus)
        self.remediation_engine = remediation_engine or RollbackRemediationEngine()

    async def process(self, context: ActionContext) -> ActionContext:
        self.event_bus.emit(EnforcementEvent.AUDIT_STARTED, context)
        self.logger.info("audit_started", action_id=context.action_id)

        invalid_result = context.params.get("invalidResult")
        if context.has_critical_violation() or invalid_result:
            context.status = EnforcementState.AUDIT_FAILED
            self.raise_violation(
                context,
                ViolationCategory.COMPLIANCE,
                ViolationSeverity.CRITICAL,
                "Final result fails compliance audit.",
                metadata={"invalidResult": invalid_result},
            )
            await self._trigger_remediation(context)
        else:
            context.status = EnforcementState.AUDIT_PASSED

        self.logger.info(
            "audit_completed", action_id=context.action_id, status=context.status.value
        )
        self.event_bus.emit(EnforcementEvent.AUDIT_COMPLETED, context)
        return context

    async def _trigger_remediation(self, context: ActionContext) -> None:
        self.logger.info("remediation_starting", action_id=context.action_id)
        self.event_bus.emit(EnforcementEvent.REMEDIATION_TRIGGERED, context)
        context.remediation_report = await self.remediation_engine.remediate(context)
        self.event_bus.emit(EnforcementEvent.REMEDIATION_COMPLETED, context)
