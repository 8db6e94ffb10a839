"""Registry records for tool servers, peer agents and callbacks."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class HealthState(str, Enum):
    UNKNOWN = "UNKNOWN"
    HEALTHY = "HEALTHY"
    UNREACHABLE = "UNREACHABLE"


class Transport(str, Enum):
    REST = "REST"
    JSON_RPC = "JSON_RPC"
    GRPC = "GRPC"


class CallbackPhase(str, Enum):
    BEFORE_AGENT = "BEFORE_AGENT"
    AFTER_AGENT = "AFTER_AGENT"


class CallbackKind(str, Enum):
    EXPRESSION = "EXPRESSION"
    NAMED_COMPONENT = "NAMED_COMPONENT"


class EventKind(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"


def _dump_ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _load_ts(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


@dataclass(slots=True)
class ToolCapability:
    """One callable operation advertised by an MCP tool server."""

    name: str
    description: str = ""
    invocation_schema: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "invocation_schema": dict(self.invocation_schema),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ToolCapability":
        return cls(
            name=payload["name"],
            description=payload.get("description") or "",
            invocation_schema=dict(payload.get("invocation_schema") or {}),
        )


@dataclass(slots=True)
class ToolDraft:
    name: str
    endpoint_url: str
    description: str = ""


@dataclass(slots=True)
class ToolEntry:
    """A registered MCP tool server and the capabilities it last advertised."""

    id: str
    name: str
    endpoint_url: str
    description: str = ""
    capabilities: List[ToolCapability] = field(default_factory=list)
    health: HealthState = HealthState.UNKNOWN
    registered_at: Optional[datetime] = None
    last_checked_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "endpoint_url": self.endpoint_url,
            "capabilities": [capability.to_dict() for capability in self.capabilities],
            "health": self.health.value,
            "registered_at": _dump_ts(self.registered_at),
            "last_checked_at": _dump_ts(self.last_checked_at),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ToolEntry":
        return cls(
            id=payload["id"],
            name=payload["name"],
            description=payload.get("description") or "",
            endpoint_url=payload["endpoint_url"],
            capabilities=[ToolCapability.from_dict(item) for item in payload.get("capabilities") or []],
            health=HealthState(payload.get("health") or HealthState.UNKNOWN.value),
            registered_at=_load_ts(payload.get("registered_at")),
            last_checked_at=_load_ts(payload.get("last_checked_at")),
        )


@dataclass(slots=True)
class AgentDescriptor:
    """Parsed form of a peer's published agent card."""

    name: str
    url: str
    description: str = ""
    version: Optional[str] = None
    protocol_version: Optional[str] = None
    supported_transports: List[Transport] = field(default_factory=list)
    capability_tags: List[str] = field(default_factory=list)
    skills: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "url": self.url,
            "description": self.description,
            "version": self.version,
            "protocol_version": self.protocol_version,
            "supported_transports": [transport.value for transport in self.supported_transports],
            "capability_tags": list(self.capability_tags),
            "skills": [dict(skill) for skill in self.skills],
        }


@dataclass(slots=True)
class AgentDraft:
    name: str
    descriptor_url: str


@dataclass(slots=True)
class AgentEntry:
    """A registered A2A peer agent."""

    id: str
    name: str
    descriptor_url: str
    description: str = ""
    supported_transports: List[Transport] = field(default_factory=list)
    capability_tags: List[str] = field(default_factory=list)
    version: Optional[str] = None
    protocol_version: Optional[str] = None
    skills: List[Dict[str, Any]] = field(default_factory=list)
    health: HealthState = HealthState.UNKNOWN
    registered_at: Optional[datetime] = None
    last_checked_at: Optional[datetime] = None

    @property
    def preferred_transport(self) -> Transport:
        return self.supported_transports[0] if self.supported_transports else Transport.JSON_RPC

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "descriptor_url": self.descriptor_url,
            "description": self.description,
            "supported_transports": [transport.value for transport in self.supported_transports],
            "capability_tags": list(self.capability_tags),
            "version": self.version,
            "protocol_version": self.protocol_version,
            "skills": [dict(skill) for skill in self.skills],
            "health": self.health.value,
            "registered_at": _dump_ts(self.registered_at),
            "last_checked_at": _dump_ts(self.last_checked_at),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AgentEntry":
        return cls(
            id=payload["id"],
            name=payload["name"],
            descriptor_url=payload["descriptor_url"],
            description=payload.get("description") or "",
            supported_transports=[Transport(value) for value in payload.get("supported_transports") or []],
            capability_tags=list(payload.get("capability_tags") or []),
            version=payload.get("version"),
            protocol_version=payload.get("protocol_version"),
            skills=[dict(skill) for skill in payload.get("skills") or []],
            health=HealthState(payload.get("health") or HealthState.UNKNOWN.value),
            registered_at=_load_ts(payload.get("registered_at")),
            last_checked_at=_load_ts(payload.get("last_checked_at")),
        )


@dataclass(slots=True)
class CallbackDraft:
    name: str
    phase: CallbackPhase
    kind: CallbackKind
    body: str
    description: str = ""
    tags: List[str] = field(default_factory=list)


@dataclass(slots=True)
class CallbackDefinition:
    """A lifecycle hook a generated agent can attach before or after its turn."""

    id: str
    name: str
    phase: CallbackPhase
    kind: CallbackKind
    body: str
    description: str = ""
    tags: List[str] = field(default_factory=list)
    registered_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def component_package(self) -> Optional[str]:
        if self.kind is not CallbackKind.NAMED_COMPONENT or "." not in self.body:
            return None
        return self.body.rsplit(".", 1)[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "phase": self.phase.value,
            "kind": self.kind.value,
            "body": self.body,
            "tags": list(self.tags),
            "registered_at": _dump_ts(self.registered_at),
            "updated_at": _dump_ts(self.updated_at),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CallbackDefinition":
        return cls(
            id=payload["id"],
            name=payload.get("name") or payload["id"],
            description=payload.get("description") or "",
            phase=CallbackPhase(payload["phase"]),
            kind=CallbackKind(payload["kind"]),
            body=payload["body"],
            tags=list(payload.get("tags") or []),
            registered_at=_load_ts(payload.get("registered_at")),
            updated_at=_load_ts(payload.get("updated_at")),
        )


@dataclass(slots=True)
class RegistryEvent:
    """Change notification published alongside every registry mutation."""

    event_kind: EventKind
    entry_id: str
    entry_snapshot: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_kind": self.event_kind.value,
            "entry_id": self.entry_id,
            "entry_snapshot": self.entry_snapshot,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RegistryEvent":
        return cls(
            event_kind=EventKind(payload["event_kind"]),
            entry_id=payload["entry_id"],
            entry_snapshot=payload.get("entry_snapshot"),
        )


__all__ = [
    "AgentDescriptor",
    "AgentDraft",
    "AgentEntry",
    "CallbackDefinition",
    "CallbackDraft",
    "CallbackKind",
    "CallbackPhase",
    "EventKind",
    "HealthState",
    "RegistryEvent",
    "ToolCapability",
    "ToolDraft",
    "ToolEntry",
    "Transport",
]
