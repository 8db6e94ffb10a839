"""MCP capability client used to probe registered tool servers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Callable, List, Optional
from urllib.parse import urlparse

from fastmcp.client import Client
from fastmcp.client.transports import ClientTransport, SSETransport, StreamableHttpTransport

from agent_studio.config import CONFIG
from agent_studio.errors import ConnectivityError
from agent_studio.registry.models import ToolCapability

logger = logging.getLogger(__name__)


def transport_kind(endpoint_url: str) -> str:
    """Return ``"sse"`` for legacy SSE endpoints, ``"streamable"`` otherwise."""

    path = urlparse(endpoint_url).path.rstrip("/")
    return "sse" if path.endswith("/sse") else "streamable"


def build_transport(endpoint_url: str) -> ClientTransport:
    if transport_kind(endpoint_url) == "sse":
        return SSETransport(endpoint_url)
    return StreamableHttpTransport(endpoint_url)


def _to_capability(tool: Any) -> ToolCapability:
    name = getattr(tool, "name", None)
    if not name:
        raise ValueError("tool listing contained an unnamed tool")
    schema = getattr(tool, "inputSchema", None)
    if schema is None:
        schema = {}
    if not isinstance(schema, dict):
        raise ValueError(f"tool '{name}' advertised a non-object invocation schema")
    return ToolCapability(
        name=name,
        description=getattr(tool, "description", None) or "",
        invocation_schema=dict(schema),
    )


class McpCapabilityClient:
    """Queries an MCP server for its tool listing within a bounded timeout.

    The listing is all-or-nothing: a timeout or protocol error after some
    capabilities were already received still fails the whole query.
    """

    def __init__(
        self,
        *,
        timeout: Optional[float] = None,
        transport_factory: Callable[[str], ClientTransport] = build_transport,
    ) -> None:
        self._timeout = timeout
        self._transport_factory = transport_factory

    @property
    def timeout(self) -> float:
        return self._timeout if self._timeout is not None else CONFIG.tool_probe_timeout

    def query_tool_capabilities(self, endpoint_url: str) -> List[ToolCapability]:
        return asyncio.run(self.aquery_tool_capabilities(endpoint_url))

    async def aquery_tool_capabilities(self, endpoint_url: str) -> List[ToolCapability]:
        collected: List[ToolCapability] = []
        timeout = self.timeout
        try:
            await asyncio.wait_for(self._collect(endpoint_url, collected), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise ConnectivityError(
                endpoint_url,
                f"capability listing timed out after {timeout:g}s ({len(collected)} partial results discarded)",
            ) from exc
        except ConnectivityError:
            raise
        except Exception as exc:
            logger.debug("MCP capability query failed for %s", endpoint_url, exc_info=True)
            raise ConnectivityError(endpoint_url, f"{type(exc).__name__}: {exc}") from exc
        return collected

    async def _collect(self, endpoint_url: str, sink: List[ToolCapability]) -> None:
        async for capability in self._stream_capabilities(endpoint_url):
            sink.append(capability)

    async def _stream_capabilities(self, endpoint_url: str) -> AsyncIterator[ToolCapability]:
        async with Client(self._transport_factory(endpoint_url)) as client:
            tools = await client.list_tools()
        for tool in tools:
            yield _to_capability(tool)


__all__ = ["McpCapabilityClient", "build_transport", "transport_kind"]
