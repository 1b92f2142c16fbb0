"""Pre-execution declarative checks."""

from rampart_layers.pre_execution import scopes
from rampart_layers.pre_execution.layer import PreExecutionLayer

__all__ = ["PreExecutionLayer", "scopes"]
