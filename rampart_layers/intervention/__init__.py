"""Adaptive intervention in response to published violations."""

from rampart_layers.intervention.layer import AdaptiveInterventionLayer

__all__ = ["AdaptiveInterventionLayer"]
