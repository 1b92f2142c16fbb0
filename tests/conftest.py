"""Pytest fixtures."""

import pytest
from fastapi.testclient import TestClient

from rampart_config.settings import Settings
from rampart_core.event_bus import EnforcementEvent, EnforcementEventBus
from rampart_core.models import ActionContext, BehaviorVector, EnforcementState
from rampart_orchestrator import GuardrailOrchestrator


class EventRecorder:
    """Records every event published on a bus, in order."""

    def __init__(self, bus: EnforcementEventBus):
        self.events: list[tuple[EnforcementEvent, object]] = []
        self.report_attached_at: dict[EnforcementEvent, bool] = {}
        for event in EnforcementEvent:
            bus.on(event, self._recorder(event))

    def _recorder(self, event: EnforcementEvent):
        def record(payload):
            self.events.append((event, payload))
            if isinstance(payload, ActionContext):
                self.report_attached_at[event] = payload.remediation_report is not None

        return record

    @property
    def names(self) -> list[EnforcementEvent]:
        return [event for event, _ in self.events]

    def payloads(self, event: EnforcementEvent) -> list:
        return [payload for name, payload in self.events if name == event]


class FakeLayer:
    """Layer double that records calls and optionally sets a status."""

    def __init__(self, name: str, status: EnforcementState | None = None, on_process=None):
        self.name = name
        self.status = status
        self.on_process = on_process
        self.calls: list[str] = []

    async def process(self, context: ActionContext) -> ActionContext:
        self.calls.append(context.action_id)
        if self.on_process is not None:
            await self.on_process(context)
        if self.status is not None:
            context.status = self.status
        return context


@pytest.fixture
def settings():
    """Settings with the simulated waits switched off."""
    return Settings(EXECUTION_SIMULATION_SECONDS=0.0, ANOMALY_SLOW_DELAY_SECONDS=0.0)


@pytest.fixture
def event_bus():
    """Fresh event bus per test."""
    bus = EnforcementEventBus()
    yield bus
    bus.clear()


@pytest.fixture
def recorder(event_bus):
    """Event recorder attached to the test bus."""
    return EventRecorder(event_bus)


@pytest.fixture
def orchestrator(event_bus, settings):
    """Orchestrator with default layers on the test bus."""
    orch = GuardrailOrchestrator(event_bus, settings)
    yield orch
    orch.close()


@pytest.fixture
def zero_vector():
    return BehaviorVector()


@pytest.fixture
def make_context():
    """Build a PENDING context from params."""

    def _make(intent: str = "generate quarterly report", agent_id: str = "analyst_agent_1", **params):
        return ActionContext.propose(agent_id, intent, params)

    return _make


@pytest.fixture
def client():
    """FastAPI test client with lifespan (event bus + orchestrator) running."""
    from apps.core_api.main import app

    with TestClient(app) as test_client:
        yield test_client
