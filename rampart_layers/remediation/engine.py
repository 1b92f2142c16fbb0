"""Remediation Engine interface and the default rollback engine.

The post-execution layer only depends on ``RemediationEngine``; it never
looks inside the transactions beyond reading the returned report.
"""

from typing import Any, Protocol

from rampart_core.models import (
    ActionContext,
    RemediationReport,
    RollbackStatus,
    RollbackTransaction,
)
from rampart_layers.remediation.exceptions import RollbackError
from rampart_obs import metrics
from rampart_obs.logging import get_logger

logger = get_logger(__name__)


class RemediationEngine(Protocol):
    """Remediation interface."""

    async def remediate(self, context: ActionContext) -> RemediationReport:
        """Undo the action's effects and report each rollback transaction."""
        ...


class RollbackHandler(Protocol):
    """Undoes one kind of system change."""

    change_type: str

    async def rollback(self, change: dict[str, Any]) -> None:
        """Revert change. Raise RollbackError when it cannot be reverted."""
        ...


class RollbackHandlerRegistry:
    """Rollback handlers keyed by system-change type."""

    def __init__(self):
        self._handlers: dict[str, RollbackHandler] = {}

    def register(self, handler: RollbackHandler) -> None:
        """Register a handler."""
        self._handlers[handler.change_type] = handler

    def get(self, change_type: str) -> RollbackHandler | None:
        """Get handler by change type."""
        return self._handlers.get(change_type)


class RollbackRemediationEngine:
    """
    Rolls back ``context.system_changes`` newest first.

    Each change becomes one transaction: ROLLED_BACK when its handler
    returns, FAILED when the handler raises RollbackError, SKIPPED when no
    handler is registered for its type (or it is not a change record).
    """

    def __init__(self, registry: RollbackHandlerRegistry | None = None):
        self.registry = registry or RollbackHandlerRegistry()

    async def remediate(self, context: ActionContext) -> RemediationReport:
        report = RemediationReport()
        for change in reversed(context.system_changes or []):
            transaction = await self._rollback_one(change)
            report.rollback_transactions.append(transaction)
            metrics.rollback_transactions_total.labels(status=transaction.status.value).inc()

        logger.info(
            "remediation_finished",
            action_id=context.action_id,
            rolled_back=report.rolled_back_count,
            failed=report.failed_count,
            total=len(report.rollback_transactions),
        )
        return report

    async def _rollback_one(self, change: Any) -> RollbackTransaction:
        record = change if isinstance(change, dict) else {"value": change}
        handler = self.registry.get(record.get("type")) if isinstance(record.get("type"), str) else None
        if handler is None:
            return RollbackTransaction(change=record, status=RollbackStatus.SKIPPED)

        try:
            await handler.rollback(record)
        except RollbackError as e:
            logger.error("rollback_failed", change_type=handler.change_type, error=str(e))
            return RollbackTransaction(change=record, status=RollbackStatus.FAILED, error=str(e))

        return RollbackTransaction(change=record, status=RollbackStatus.ROLLED_BACK)
