"""
Rampart FastAPI Application Entry Point.

This module initializes the FastAPI application with:
- CORS middleware
- OpenTelemetry instrumentation
- Request ID injection and request logging
- Lifespan context management (event bus, orchestrator)
- Router mounting
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from apps.core_api.deps import settings
from apps.core_api.middleware import RequestIDMiddleware, RequestLoggingMiddleware
from apps.core_api.routers import act, health, metrics
from rampart_core.event_bus import EnforcementEventBus
from rampart_obs.logging import get_logger, setup_logging
from rampart_obs.tracing import setup_tracing
from rampart_orchestrator import GuardrailOrchestrator

setup_logging(settings)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Builds the one event bus for the process and the orchestrator bound to
    it; drains outstanding handler tasks and tears the bus down on shutdown.
    """
    logger.info("rampart_starting", environment=settings.ENVIRONMENT)

    event_bus = EnforcementEventBus()
    orchestrator = GuardrailOrchestrator(event_bus, settings)
    app.state.event_bus = event_bus
    app.state.orchestrator = orchestrator

    yield

    logger.info("rampart_shutting_down", active_actions=len(orchestrator.active_action_ids))
    await event_bus.drain()
    orchestrator.close()
    event_bus.clear()


app = FastAPI(
    title="Rampart API",
    description="Runtime guardrails for autonomous-agent actions",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

setup_tracing(settings, app)

# ============================================================================
# MIDDLEWARE
# ============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.API_CORS_ORIGINS.split(",") if settings.API_CORS_ORIGINS else ["*"],
    allow_credentials=settings.API_CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestIDMiddleware)

# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log unhandled exceptions and return a sanitized 500."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        request_id=getattr(request.state, "request_id", None),
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred.",
        },
    )


# ============================================================================
# ROUTERS
# ============================================================================

app.include_router(act.router, prefix="", tags=["enforcement"])
app.include_router(health.router, prefix="", tags=["health"])
app.include_router(metrics.router, prefix="", tags=["metrics"])


@app.get("/", tags=["root"])
async def root():
    """
    Root endpoint - API information.

    Returns:
        API metadata and available endpoints
    """
    return {
        "name": "Rampart API",
        "version": "0.1.0",
        "description": "Runtime guardrails for autonomous-agent actions",
        "docs": "/docs",
        "health": "/healthz",
        "metrics": "/metrics",
        "endpoints": {
            "coordinate": "POST /act",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "apps.core_api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True,
        log_level="info",
    )
