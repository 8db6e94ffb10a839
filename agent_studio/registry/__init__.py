"""
Registries for the collaborators a generated agent can reference.

This package provides:
- Tool servers reachable over MCP (via registry.tools)
- Peer agents reachable over A2A (via registry.agents)
- Lifecycle callbacks (via registry.callbacks)
- The metadata store every registry persists to (via registry.store)
"""

from .base import HealthTrackedRegistry
from .health import next_health
from .models import (
    AgentDescriptor,
    AgentDraft,
    AgentEntry,
    CallbackDefinition,
    CallbackDraft,
    CallbackKind,
    CallbackPhase,
    EventKind,
    HealthState,
    RegistryEvent,
    ToolCapability,
    ToolDraft,
    ToolEntry,
    Transport,
)
from .store import MemoryMetadataStore, MetadataStore, RedisMetadataStore, get_metadata_store
# Registries that depend on the probe clients live in registry.tools,
# registry.agents and registry.callbacks.

__all__ = [
    'AgentDescriptor',
    'AgentDraft',
    'AgentEntry',
    'CallbackDefinition',
    'CallbackDraft',
    'CallbackKind',
    'CallbackPhase',
    'EventKind',
    'HealthState',
    'HealthTrackedRegistry',
    'MemoryMetadataStore',
    'MetadataStore',
    'RedisMetadataStore',
    'RegistryEvent',
    'ToolCapability',
    'ToolDraft',
    'ToolEntry',
    'Transport',
    'get_metadata_store',
    'next_health',
]
