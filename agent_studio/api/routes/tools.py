"""Tool registry endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from agent_studio.api.dependencies import get_tool_registry, to_http_exception
from agent_studio.api.schemas import (
    RegistryStatusResponse,
    ToolCapabilityResponse,
    ToolCreateRequest,
    ToolDiscoverRequest,
    ToolDiscoverResponse,
    ToolResponse,
)
from agent_studio.errors import StudioError
from agent_studio.registry.models import ToolDraft, ToolEntry
from agent_studio.registry.tools import ToolRegistry

router = APIRouter()


def _serialize(entry: ToolEntry) -> ToolResponse:
    return ToolResponse.model_validate(entry.to_dict())


@router.get("/tools", response_model=List[ToolResponse])
def list_tools(registry: ToolRegistry = Depends(get_tool_registry)) -> List[ToolResponse]:
    return [_serialize(entry) for entry in registry.list()]


@router.post("/tools", response_model=ToolResponse, status_code=status.HTTP_201_CREATED)
def register_tool(
    payload: ToolCreateRequest,
    registry: ToolRegistry = Depends(get_tool_registry),
) -> ToolResponse:
    """Register a tool server; an unreachable server is stored as UNREACHABLE."""

    draft = ToolDraft(name=payload.name, endpoint_url=payload.endpoint_url, description=payload.description)
    try:
        entry = registry.register(draft)
    except StudioError as exc:
        raise to_http_exception(exc) from exc
    return _serialize(entry)


@router.post("/tools/discover", response_model=ToolDiscoverResponse)
def discover_tool_capabilities(
    payload: ToolDiscoverRequest,
    registry: ToolRegistry = Depends(get_tool_registry),
) -> ToolDiscoverResponse:
    """Query an MCP endpoint without registering it."""

    try:
        capabilities = registry.discover(payload.endpoint_url)
    except StudioError as exc:
        raise to_http_exception(exc) from exc
    return ToolDiscoverResponse(
        endpoint_url=payload.endpoint_url,
        capabilities=[ToolCapabilityResponse.model_validate(item.to_dict()) for item in capabilities],
    )


@router.get("/tools/status", response_model=RegistryStatusResponse)
def tool_registry_status(registry: ToolRegistry = Depends(get_tool_registry)) -> RegistryStatusResponse:
    return RegistryStatusResponse.from_summary(registry.status_summary())


@router.get("/tools/{tool_id}", response_model=ToolResponse)
def get_tool(tool_id: str, registry: ToolRegistry = Depends(get_tool_registry)) -> ToolResponse:
    try:
        return _serialize(registry.get(tool_id))
    except StudioError as exc:
        raise to_http_exception(exc) from exc


@router.put("/tools/{tool_id}", response_model=ToolResponse)
def update_tool(
    tool_id: str,
    payload: ToolCreateRequest,
    registry: ToolRegistry = Depends(get_tool_registry),
) -> ToolResponse:
    draft = ToolDraft(name=payload.name, endpoint_url=payload.endpoint_url, description=payload.description)
    try:
        return _serialize(registry.update(tool_id, draft))
    except StudioError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/tools/{tool_id}", status_code=status.HTTP_204_NO_CONTENT)
def unregister_tool(tool_id: str, registry: ToolRegistry = Depends(get_tool_registry)) -> Response:
    try:
        registry.unregister(tool_id)
    except StudioError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/tools/{tool_id}/refresh", response_model=ToolResponse)
def refresh_tool(tool_id: str, registry: ToolRegistry = Depends(get_tool_registry)) -> ToolResponse:
    try:
        return _serialize(registry.refresh(tool_id))
    except StudioError as exc:
        raise to_http_exception(exc) from exc
