"""FastAPI dependencies shared across the agent studio API."""

from __future__ import annotations

from fastapi import Depends, HTTPException, status

from ..errors import (
    ConnectivityError,
    GenerationError,
    NotFoundError,
    StudioError,
    UnresolvedReferenceError,
    ValidationError,
)
from ..generator import AgentGenerator
from ..registry.agents import AgentRegistry
from ..registry.callbacks import CallbackRegistry
from ..registry.providers import get_agent_registry, get_callback_registry, get_tool_registry
from ..registry.tools import ToolRegistry


def get_generator(
    tools: ToolRegistry = Depends(get_tool_registry),
    agents: AgentRegistry = Depends(get_agent_registry),
    callbacks: CallbackRegistry = Depends(get_callback_registry),
) -> AgentGenerator:
    return AgentGenerator(tools, agents, callbacks)


_STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (UnresolvedReferenceError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ConnectivityError, status.HTTP_502_BAD_GATEWAY),
    (GenerationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def to_http_exception(exc: StudioError) -> HTTPException:
    """Translate a domain error into an HTTP error with a structured detail."""

    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=exc.to_detail())
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.to_detail())
