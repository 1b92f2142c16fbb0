"""
FastAPI Dependency Injection.

Provides dependency injection for:
- Application settings
- The orchestrator built in the app lifespan
"""

from fastapi import Request

from rampart_config.settings import Settings
from rampart_orchestrator import GuardrailOrchestrator

settings = Settings()


def get_settings() -> Settings:
    """Dependency: Application settings."""
    return settings


def get_orchestrator(request: Request) -> GuardrailOrchestrator:
    """
    Dependency: Guardrail orchestrator constructed at startup.

    Example Usage:
        @router.post("/act")
        async def act(orchestrator: GuardrailOrchestrator = Depends(get_orchestrator)):
            context = await orchestrator.coordinate("agent", "intent", {})
    """
    return request.app.state.orchestrator
