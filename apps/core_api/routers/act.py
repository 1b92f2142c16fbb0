"""
/act Router - Guarded Action Endpoint.

Handles:
- POST /act: Run a proposed agent action through pre-execution checks,
  in-process monitoring and post-execution auditing
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from apps.core_api.deps import get_orchestrator
from rampart_core.models import ActionContext
from rampart_obs.logging import get_logger
from rampart_orchestrator import GuardrailOrchestrator

router = APIRouter()
logger = get_logger(__name__)


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================


class ActRequest(BaseModel):
    """Request schema for POST /act."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "agentId": "analyst_agent_42",
                "intent": "generate quarterly revenue report",
                "params": {
                    "requiredScopes": ["reports.generate"],
                    "executionSteps": [
                        {
                            "observedIntent": "generate quarterly revenue report",
                            "apiCalls": ["warehouse.query"],
                            "dataAccess": [
                                {"operation": "read", "recordCount": 120, "sensitivity": "low"}
                            ],
                        }
                    ],
                    "monitorPolicy": {"allowedApis": ["warehouse.query"]},
                },
            }
        },
    )

    agent_id: str = Field(..., min_length=1, description="Agent proposing the action")
    intent: str = Field(..., description="Declared purpose of the action")
    params: dict[str, Any] = Field(default_factory=dict, description="Action payload")


# ============================================================================
# ENDPOINT: POST /act
# ============================================================================


@router.post("/act", response_model=ActionContext)
async def coordinate_action(
    request_body: ActRequest,
    orchestrator: GuardrailOrchestrator = Depends(get_orchestrator),
) -> ActionContext:
    """
    Coordinate a proposed action.

    Policy outcomes are reported through ``status``, ``violations`` and
    ``interventions`` on the returned context; they are never HTTP errors.
    """
    logger.info("act_request_received", agent_id=request_body.agent_id)

    return await orchestrator.coordinate(
        request_body.agent_id, request_body.intent, request_body.params
    )
