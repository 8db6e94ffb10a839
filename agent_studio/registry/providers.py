"""Process-wide registry instances bound to the configured metadata store."""

from __future__ import annotations

from functools import lru_cache

from .agents import AgentRegistry
from .callbacks import CallbackRegistry
from .store import get_metadata_store
from .tools import ToolRegistry


@lru_cache(maxsize=1)
def get_tool_registry() -> ToolRegistry:
    """Return the shared tool registry instance."""

    return ToolRegistry(get_metadata_store())


@lru_cache(maxsize=1)
def get_agent_registry() -> AgentRegistry:
    """Return the shared agent registry instance."""

    return AgentRegistry(get_metadata_store())


@lru_cache(maxsize=1)
def get_callback_registry() -> CallbackRegistry:
    """Return the shared callback registry instance."""

    return CallbackRegistry(get_metadata_store())


def reset_registries() -> None:
    """Drop cached registries and store, e.g. after ``reload_config()``."""

    get_tool_registry.cache_clear()
    get_agent_registry.cache_clear()
    get_callback_registry.cache_clear()
    get_metadata_store.cache_clear()


__all__ = ["get_agent_registry", "get_callback_registry", "get_tool_registry", "reset_registries"]
