"""Remediation: rollback of an action's system changes after a failed audit."""

from rampart_layers.remediation.engine import (
    RemediationEngine,
    RollbackHandler,
    RollbackHandlerRegistry,
    RollbackRemediationEngine,
)
from rampart_layers.remediation.exceptions import RampartError, RollbackError

__all__ = [
    "RampartError",
    "RemediationEngine",
    "RollbackError",
    "RollbackHandler",
    "RollbackHandlerRegistry",
    "RollbackRemediationEngine",
]
