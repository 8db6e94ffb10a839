"""Route modules for the agent studio API."""

from . import agents, callbacks, generator, tools

__all__ = ["agents", "callbacks", "generator", "tools"]
