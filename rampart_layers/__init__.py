"""
Rampart Enforcement Layers.

Pre-execution checks, in-process monitoring, adaptive intervention,
post-execution auditing and remediation.
"""

from rampart_layers.base import BaseEnforcementLayer, EnforcementLayer

__all__ = ["BaseEnforcementLayer", "EnforcementLayer"]
