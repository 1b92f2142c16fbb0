"""
Rampart FastAPI Application.

Main API server providing:
- /act: Coordinate a proposed agent action through every enforcement stage
- /healthz, /readyz: Health checks
- /metrics: Prometheus metrics
"""

__all__ = ["app"]
