"""Pre-Execution Validation Layer.

Declarative checks run before an action executes:
- declared intent must be non-empty
- trust coefficient must meet the configured floor
- every required scope must be granted to the agent
- no system change may target a protected prefix

Any violation of HIGH severity or above fails the action.
"""

from rampart_config.settings import Settings
from rampart_core.event_bus import EnforcementEventBus
from rampart_core.models import (
    ActionContext,
    EnforcementState,
    ViolationCategory,
    ViolationSeverity,
)
from rampart_layers.base import BaseEnforcementLayer
from rampart_layers.pre_execution.scopes import granted_scopes, missing_scopes


class PreExecutionLayer(BaseEnforcementLayer):
    name = "PreExecutionValidation"

    def __init__(
        self,
        event_bus: EnforcementEventBus,
        settings: Settings,
        agent_scopes: dict[str, list[str]] | None = None,
    ):
        super().__init__(event_bus)
        self.settings = settings
        self.agent_scopes = agent_scopes

    async def process(self, context: ActionContext) -> ActionContext:
        self.logger.info(
            "pre_execution_check", action_id=context.action_id, agent_id=context.agent_id
        )

        raised = [
            *self._check_intent(context),
            *self._check_trust(context),
            *self._check_scopes(context),
            *self._check_system_changes(context),
        ]

        if any(v.severity >= ViolationSeverity.HIGH for v in raised):
            context.status = EnforcementState.PRE_EXECUTION_FAILED
            self.logger.warning(
                "pre_execution_failed",
                action_id=context.action_id,
                violations=[v.id for v in raised],
            )
        return context

    def _check_intent(self, context: ActionContext):
        if context.intent and context.intent.strip():
            return []
        return [
            self.raise_violation(
                context,
                ViolationCategory.COMPLIANCE,
                ViolationSeverity.HIGH,
                "Action declares no intent.",
            )
        ]

    def _check_trust(self, context: ActionContext):
        if context.trust_coefficient >= self.settings.MIN_TRUST_COEFFICIENT:
            return []
        return [
            self.raise_violation(
                context,
                ViolationCategory.TRUST,
                ViolationSeverity.HIGH,
                f"Trust coefficient {context.trust_coefficient:.2f} is below "
                f"{self.settings.MIN_TRUST_COEFFICIENT:.2f}.",
                metadata={"trustCoefficient": context.trust_coefficient},
            )
        ]

    def _check_scopes(self, context: ActionContext):
        required = context.params.get("requiredScopes")
        if not isinstance(required, list) or not required:
            return []
        missing = missing_scopes(
            [str(s) for s in required], granted_scopes(context.agent_id, self.agent_scopes)
        )
        if not missing:
            return []
        return [
            self.raise_violation(
                context,
                ViolationCategory.SCOPE,
                ViolationSeverity.CRITICAL,
                f"Agent {context.agent_id} lacks scopes: {', '.join(missing)}.",
                metadata={"missingScopes": missing, "requiredScopes": required},
            )
        ]

    def _check_system_changes(self, context: ActionContext):
        protected = self.settings.protected_targets()
        violations = []
        for change in context.system_changes or []:
            target = change.get("target") if isinstance(change, dict) else None
            if not isinstance(target, str):
                continue
            if any(target.startswith(prefix) for prefix in protected):
                violations.append(
                    self.raise_violation(
                        context,
                        ViolationCategory.SECURITY,
                        ViolationSeverity.CRITICAL,
                        f"System change targets protected resource {target}.",
                        metadata={"change": change},
                    )
                )
        return violations
