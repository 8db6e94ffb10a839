"""Pydantic schemas for the agent studio API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from agent_studio.registry.models import CallbackKind, CallbackPhase, HealthState, Transport


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class ToolCreateRequest(BaseModel):
    name: str
    endpoint_url: str
    description: str = ""

    @field_validator("name", "endpoint_url", "description", mode="before")
    @classmethod
    def strip_strings(cls, value: Any) -> Any:
        return _strip(value)


class ToolDiscoverRequest(BaseModel):
    endpoint_url: str

    @field_validator("endpoint_url", mode="before")
    @classmethod
    def strip_url(cls, value: Any) -> Any:
        return _strip(value)


class ToolCapabilityResponse(BaseModel):
    name: str
    description: str = ""
    invocation_schema: Dict[str, Any] = Field(default_factory=dict)


class ToolDiscoverResponse(BaseModel):
    endpoint_url: str
    capabilities: List[ToolCapabilityResponse] = Field(default_factory=list)


class ToolResponse(BaseModel):
    id: str
    name: str
    description: str = ""
    endpoint_url: str
    capabilities: List[ToolCapabilityResponse] = Field(default_factory=list)
    health: HealthState
    registered_at: Optional[datetime] = None
    last_checked_at: Optional[datetime] = None


class AgentCreateRequest(BaseModel):
    name: str
    descriptor_url: str

    @field_validator("name", "descriptor_url", mode="before")
    @classmethod
    def strip_strings(cls, value: Any) -> Any:
        return _strip(value)


class AgentResponse(BaseModel):
    id: str
    name: str
    descriptor_url: str
    description: str = ""
    supported_transports: List[Transport] = Field(default_factory=list)
    capability_tags: List[str] = Field(default_factory=list)
    version: Optional[str] = None
    protocol_version: Optional[str] = None
    skills: List[Dict[str, Any]] = Field(default_factory=list)
    health: HealthState
    registered_at: Optional[datetime] = None
    last_checked_at: Optional[datetime] = None


class ConnectivityTestRequest(BaseModel):
    url: str


class AgentDescriptorResponse(BaseModel):
    name: str
    url: str
    description: str = ""
    version: Optional[str] = None
    protocol_version: Optional[str] = None
    supported_transports: List[Transport] = Field(default_factory=list)
    capability_tags: List[str] = Field(default_factory=list)
    skills: List[Dict[str, Any]] = Field(default_factory=list)


class ConnectivityTestResponse(BaseModel):
    healthy: bool
    descriptor: Optional[AgentDescriptorResponse] = None
    error: Optional[str] = None


class RegistryStatusResponse(BaseModel):
    total: int
    healthy: int
    unreachable: int
    unknown: int

    @classmethod
    def from_summary(cls, summary: Dict[str, int]) -> "RegistryStatusResponse":
        return cls(
            total=summary["total"],
            healthy=summary[HealthState.HEALTHY.value],
            unreachable=summary[HealthState.UNREACHABLE.value],
            unknown=summary[HealthState.UNKNOWN.value],
        )


class CallbackRequest(BaseModel):
    name: str
    phase: CallbackPhase
    kind: CallbackKind
    body: str
    description: str = ""
    tags: List[str] = Field(default_factory=list)

    @field_validator("phase", "kind", mode="before")
    @classmethod
    def normalize_enum(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class CallbackResponse(BaseModel):
    id: str
    name: str
    description: str = ""
    phase: CallbackPhase
    kind: CallbackKind
    body: str
    tags: List[str] = Field(default_factory=list)
    registered_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GenerateAgentRequest(BaseModel):
    agent_name: str
    package_identifier: str
    provider_credential: str
    description: str = ""
    instructions: str = ""
    server_port: int = 8000
    tool_ids: List[str] = Field(default_factory=list)
    subagent_ids: List[str] = Field(default_factory=list)
    callback_ids: List[str] = Field(default_factory=list)
    model: Optional[str] = None
    temperature: float = 1.0
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    max_tokens: Optional[int] = None
