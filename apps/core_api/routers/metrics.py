"""
Prometheus Metrics Endpoint.

Exposes /metrics for Prometheus scraping.
"""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics():
    """
    Prometheus metrics endpoint.

    Exposes the enforcement metrics registered in rampart_obs.metrics:
    actions by final state, violations, interventions, deviation scores,
    rollback transactions and pipeline duration.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
