"""Repository-wide pytest fixtures."""

from __future__ import annotations

from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import pytest

from agent_studio.config import reload_config
from agent_studio.errors import ConnectivityError
from agent_studio.registry.agents import AgentRegistry
from agent_studio.registry.callbacks import CallbackRegistry
from agent_studio.registry.models import AgentDescriptor, ToolCapability, Transport
from agent_studio.registry.providers import reset_registries
from agent_studio.registry.store import MemoryMetadataStore
from agent_studio.registry.tools import ToolRegistry
from agent_studio.services.a2a import ConnectivityResult


@pytest.fixture(autouse=True)
def _set_default_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Pin the runtime to the in-memory store with no background polling."""

    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("METADATA_STORE_BACKEND", "memory")
    monkeypatch.setenv("HEALTH_MONITOR_MODE", "off")
    monkeypatch.setenv("SEED_DEFAULT_CALLBACKS", "false")
    monkeypatch.setenv("TOOL_PROBE_TIMEOUT", "2")
    monkeypatch.setenv("AGENT_PROBE_TIMEOUT", "2")
    monkeypatch.delenv("CALLBACK_COMPONENT_PACKAGES", raising=False)
    monkeypatch.delenv("CALLBACK_COMPONENT_ARTIFACT", raising=False)
    monkeypatch.delenv("DEFAULT_AGENT_MODEL", raising=False)
    monkeypatch.delenv("API_CORS_ORIGINS", raising=False)
    reload_config()
    reset_registries()
    yield
    reset_registries()


class SteppingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


class StubCapabilityClient:
    """Scripted MCP client: one outcome per call, the last one repeats.

    Outcomes are either a list of capability names or an exception instance.
    A mapping of endpoint URL to outcome list overrides the default script.
    """

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes: List[Any] = list(outcomes) or [[]]
        self.by_url: Dict[str, List[Any]] = {}
        self.calls: List[str] = []

    def script(self, url: str, *outcomes: Any) -> None:
        self.by_url[url] = list(outcomes)

    def query_tool_capabilities(self, endpoint_url: str) -> List[ToolCapability]:
        self.calls.append(endpoint_url)
        queue = self.by_url.get(endpoint_url, self.outcomes)
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, Exception):
            raise outcome
        return [ToolCapability(name=name, description=f"{name} tool") for name in outcome]


def unreachable(url: str = "http://localhost:9999/mcp") -> ConnectivityError:
    return ConnectivityError(url, "connection refused")


class StubDiscoveryClient:
    """Scripted A2A client keyed by descriptor URL; unknown URLs are unreachable."""

    def __init__(self) -> None:
        self.cards: Dict[str, List[Any]] = {}
        self.calls: List[str] = []

    def publish(
        self,
        url: str,
        *,
        name: str = "Remote agent",
        transports: List[Transport] | None = None,
        tags: List[str] | None = None,
    ) -> AgentDescriptor:
        descriptor = AgentDescriptor(
            name=name,
            url=url,
            description=f"{name} card",
            version="1.0.0",
            protocol_version="0.3.0",
            supported_transports=list(transports or [Transport.JSON_RPC]),
            capability_tags=list(tags or []),
            skills=[{"id": "main", "name": name, "tags": list(tags or [])}],
        )
        self.cards.setdefault(url, []).append(descriptor)
        return descriptor

    def fail(self, url: str) -> None:
        self.cards.setdefault(url, []).append(ConnectivityError(url, "agent card request returned HTTP 503"))

    def fetch_agent_descriptor(self, url: str) -> AgentDescriptor:
        self.calls.append(url)
        queue = self.cards.get(url)
        if not queue:
            raise ConnectivityError(url, "connection refused")
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def test_connectivity(self, url: str) -> ConnectivityResult:
        try:
            return ConnectivityResult(healthy=True, descriptor=self.fetch_agent_descriptor(url))
        except ConnectivityError as exc:
            return ConnectivityResult(healthy=False, error=exc.reason)


@pytest.fixture
def store() -> MemoryMetadataStore:
    """Fresh in-memory metadata store."""

    return MemoryMetadataStore()


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def capability_client() -> StubCapabilityClient:
    return StubCapabilityClient(["search"])


@pytest.fixture
def discovery_client() -> StubDiscoveryClient:
    return StubDiscoveryClient()


@pytest.fixture
def tool_registry(store, capability_client, clock) -> ToolRegistry:
    return ToolRegistry(store, capability_client=capability_client, clock=clock)


@pytest.fixture
def agent_registry(store, discovery_client, clock) -> AgentRegistry:
    return AgentRegistry(store, discovery_client=discovery_client, clock=clock)


@pytest.fixture
def callback_registry(store, clock) -> CallbackRegistry:
    return CallbackRegistry(store, clock=clock)


@pytest.fixture
def recorded_events():
    """Attach to a registry with ``recorded_events.attach(registry)``; events land in ``.items``."""

    class _Recorder:
        def __init__(self) -> None:
            self.items: List[Any] = []
            self._subscriptions: List[Any] = []

        def attach(self, registry) -> "_Recorder":
            self._subscriptions.append(registry.subscribe(self.items.append))
            return self

        def close(self) -> None:
            for subscription in self._subscriptions:
                subscription.close()

    recorder = _Recorder()
    yield recorder
    recorder.close()
