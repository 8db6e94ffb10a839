"""Callback catalogue endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from agent_studio.api.dependencies import get_callback_registry, to_http_exception
from agent_studio.api.schemas import CallbackRequest, CallbackResponse
from agent_studio.errors import StudioError
from agent_studio.registry.callbacks import CallbackRegistry
from agent_studio.registry.models import CallbackDefinition, CallbackDraft

router = APIRouter()


def _serialize(definition: CallbackDefinition) -> CallbackResponse:
    return CallbackResponse.model_validate(definition.to_dict())


def _draft(payload: CallbackRequest) -> CallbackDraft:
    return CallbackDraft(
        name=payload.name,
        phase=payload.phase,
        kind=payload.kind,
        body=payload.body,
        description=payload.description,
        tags=list(payload.tags),
    )


@router.get("/callbacks", response_model=List[CallbackResponse])
def list_callbacks(
    phase: Optional[str] = Query(default=None, description="BEFORE_AGENT or AFTER_AGENT"),
    registry: CallbackRegistry = Depends(get_callback_registry),
) -> List[CallbackResponse]:
    try:
        definitions = registry.list_by_phase(phase) if phase else registry.list()
    except StudioError as exc:
        raise to_http_exception(exc) from exc
    return [_serialize(definition) for definition in definitions]


@router.post("/callbacks", response_model=CallbackResponse, status_code=status.HTTP_201_CREATED)
def register_callback(
    payload: CallbackRequest,
    registry: CallbackRegistry = Depends(get_callback_registry),
) -> CallbackResponse:
    try:
        return _serialize(registry.register(_draft(payload)))
    except StudioError as exc:
        raise to_http_exception(exc) from exc


@router.get("/callbacks/{callback_id}", response_model=CallbackResponse)
def get_callback(callback_id: str, registry: CallbackRegistry = Depends(get_callback_registry)) -> CallbackResponse:
    try:
        return _serialize(registry.get(callback_id))
    except StudioError as exc:
        raise to_http_exception(exc) from exc


@router.put("/callbacks/{callback_id}", response_model=CallbackResponse)
def update_callback(
    callback_id: str,
    payload: CallbackRequest,
    registry: CallbackRegistry = Depends(get_callback_registry),
) -> CallbackResponse:
    try:
        return _serialize(registry.update(callback_id, _draft(payload)))
    except StudioError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/callbacks/{callback_id}", status_code=status.HTTP_204_NO_CONTENT)
def unregister_callback(callback_id: str, registry: CallbackRegistry = Depends(get_callback_registry)) -> Response:
    try:
        registry.unregister(callback_id)
    except StudioError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
