"""Enforcement orchestration: per-action state machine and violation wiring."""

from rampart_orchestrator.orchestrator import GuardrailOrchestrator

__all__ = ["GuardrailOrchestrator"]
