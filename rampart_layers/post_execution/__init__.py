"""Post-execution result auditing."""

from rampart_layers.post_execution.layer import PostExecutionLayer

__all__ = ["PostExecutionLayer"]
