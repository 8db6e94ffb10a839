"""Peer agent registry endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from agent_studio.api.dependencies import get_agent_registry, to_http_exception
from agent_studio.api.schemas import (
    AgentCreateRequest,
    AgentResponse,
    ConnectivityTestRequest,
    ConnectivityTestResponse,
    RegistryStatusResponse,
)
from agent_studio.errors import StudioError
from agent_studio.registry.agents import AgentRegistry
from agent_studio.registry.models import AgentDraft, AgentEntry

router = APIRouter()


def _serialize(entry: AgentEntry) -> AgentResponse:
    return AgentResponse.model_validate(entry.to_dict())


@router.get("/agents", response_model=List[AgentResponse])
def list_agents(registry: AgentRegistry = Depends(get_agent_registry)) -> List[AgentResponse]:
    return [_serialize(entry) for entry in registry.list()]


@router.post("/agents", response_model=AgentResponse, status_code=status.HTTP_201_CREATED)
def register_agent(
    payload: AgentCreateRequest,
    registry: AgentRegistry = Depends(get_agent_registry),
) -> AgentResponse:
    try:
        entry = registry.register(AgentDraft(name=payload.name, descriptor_url=payload.descriptor_url))
    except StudioError as exc:
        raise to_http_exception(exc) from exc
    return _serialize(entry)


@router.post("/agents/test", response_model=ConnectivityTestResponse)
def test_agent_connectivity(
    payload: ConnectivityTestRequest,
    registry: AgentRegistry = Depends(get_agent_registry),
) -> ConnectivityTestResponse:
    """Fetch a peer's agent card without registering it.

    Reachability failures are reported in the body (``healthy: false``);
    only a malformed URL is an error response.
    """

    try:
        result = registry.test_connectivity(payload.url)
    except StudioError as exc:
        raise to_http_exception(exc) from exc
    return ConnectivityTestResponse.model_validate(result.to_dict())


@router.get("/agents/status", response_model=RegistryStatusResponse)
def agent_registry_status(registry: AgentRegistry = Depends(get_agent_registry)) -> RegistryStatusResponse:
    return RegistryStatusResponse.from_summary(registry.status_summary())


@router.get("/agents/capability/{tag}", response_model=List[AgentResponse])
def find_agents_by_capability(tag: str, registry: AgentRegistry = Depends(get_agent_registry)) -> List[AgentResponse]:
    try:
        entries = registry.find_by_capability(tag)
    except StudioError as exc:
        raise to_http_exception(exc) from exc
    return [_serialize(entry) for entry in entries]


@router.get("/agents/{agent_id}", response_model=AgentResponse)
def get_agent(agent_id: str, registry: AgentRegistry = Depends(get_agent_registry)) -> AgentResponse:
    try:
        return _serialize(registry.get(agent_id))
    except StudioError as exc:
        raise to_http_exception(exc) from exc


@router.put("/agents/{agent_id}", response_model=AgentResponse)
def update_agent(
    agent_id: str,
    payload: AgentCreateRequest,
    registry: AgentRegistry = Depends(get_agent_registry),
) -> AgentResponse:
    try:
        entry = registry.update(agent_id, AgentDraft(name=payload.name, descriptor_url=payload.descriptor_url))
    except StudioError as exc:
        raise to_http_exception(exc) from exc
    return _serialize(entry)


@router.delete("/agents/{agent_id}", status_code=status.HTTP_204_NO_CONTENT)
def unregister_agent(agent_id: str, registry: AgentRegistry = Depends(get_agent_registry)) -> Response:
    try:
        registry.unregister(agent_id)
    except StudioError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/agents/{agent_id}/refresh", response_model=AgentResponse)
def refresh_agent(agent_id: str, registry: AgentRegistry = Depends(get_agent_registry)) -> AgentResponse:
    try:
        return _serialize(registry.refresh(agent_id))
    except StudioError as exc:
        raise to_http_exception(exc) from exc
