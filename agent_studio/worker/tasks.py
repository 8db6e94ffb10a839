"""Celery task definitions for registry health polling.

Sweeps run on the beat schedule and fan out one task per entry, so entries
refresh in parallel across workers while the store's per-entry lock keeps
two refreshes of the same entry from interleaving.
"""

from __future__ import annotations

from typing import Any, Dict

from celery.utils.log import get_task_logger

from agent_studio.registry.providers import get_agent_registry, get_tool_registry

from .celery_app import celery_app


logger = get_task_logger(__name__)


@celery_app.task(bind=True, name="registry.refresh_tools")
def refresh_tools(self) -> Dict[str, Any]:
    tool_ids = [entry.id for entry in get_tool_registry().list()]
    for tool_id in tool_ids:
        refresh_tool.delay(tool_id)
    logger.info("Scheduled %d tool refreshes", len(tool_ids))
    return {"scheduled": len(tool_ids)}


@celery_app.task(bind=True, name="registry.refresh_agents")
def refresh_agents(self) -> Dict[str, Any]:
    agent_ids = [entry.id for entry in get_agent_registry().list()]
    for agent_id in agent_ids:
        refresh_agent.delay(agent_id)
    logger.info("Scheduled %d agent refreshes", len(agent_ids))
    return {"scheduled": len(agent_ids)}


@celery_app.task(bind=True, name="registry.refresh_tool")
def refresh_tool(self, tool_id: str) -> Dict[str, Any]:
    state = get_tool_registry().try_refresh(tool_id)
    return {"id": tool_id, "health": state.value if state else None}


@celery_app.task(bind=True, name="registry.refresh_agent")
def refresh_agent(self, agent_id: str) -> Dict[str, Any]:
    state = get_agent_registry().try_refresh(agent_id)
    return {"id": agent_id, "health": state.value if state else None}


__all__ = ["refresh_agent", "refresh_agents", "refresh_tool", "refresh_tools"]
