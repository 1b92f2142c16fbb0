"""
FastAPI Routers.

Contains:
- act: POST /act (guarded action coordination)
- health: GET /healthz, /readyz
- metrics: GET /metrics
"""

__all__ = ["act", "health", "metrics"]
