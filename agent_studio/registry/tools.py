"""Registry of MCP tool servers and the capabilities they advertise."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from agent_studio.registry.base import HealthTrackedRegistry, validate_http_url, validate_name
from agent_studio.registry.models import ToolCapability, ToolDraft, ToolEntry
from agent_studio.registry.store import MetadataStore
from agent_studio.services.mcp import McpCapabilityClient


class ToolRegistry(HealthTrackedRegistry[ToolEntry, ToolDraft]):
    namespace = "tools"
    kind = "tool"
    log_prefix = "[tool-registry]"

    def __init__(
        self,
        store: Optional[MetadataStore] = None,
        *,
        capability_client: Optional[McpCapabilityClient] = None,
        clock=None,
    ) -> None:
        super().__init__(store, clock=clock)
        self._capabilities = capability_client or McpCapabilityClient()

    def _validate(self, draft: ToolDraft) -> ToolDraft:
        return ToolDraft(
            name=validate_name(draft.name),
            endpoint_url=validate_http_url(draft.endpoint_url, field="endpoint_url"),
            description=(draft.description or "").strip(),
        )

    def _new_entry(self, entry_id: str, draft: ToolDraft, now: datetime) -> ToolEntry:
        return ToolEntry(
            id=entry_id,
            name=draft.name,
            description=draft.description,
            endpoint_url=draft.endpoint_url,
            registered_at=now,
        )

    def _apply_draft(self, entry: ToolEntry, draft: ToolDraft) -> bool:
        moved = entry.endpoint_url != draft.endpoint_url
        entry.name = draft.name
        entry.description = draft.description
        entry.endpoint_url = draft.endpoint_url
        return moved

    def _probe(self, entry: ToolEntry) -> List[ToolCapability]:
        return self._capabilities.query_tool_capabilities(entry.endpoint_url)

    def _apply_probe(self, entry: ToolEntry, payload: List[ToolCapability]) -> None:
        entry.capabilities = list(payload)

    def _clear_probe(self, entry: ToolEntry) -> None:
        entry.capabilities = []

    def _decode(self, payload: Dict[str, Any]) -> ToolEntry:
        return ToolEntry.from_dict(payload)

    def discover(self, endpoint_url: str) -> List[ToolCapability]:
        """Query an endpoint's capabilities without registering it."""

        url = validate_http_url(endpoint_url, field="endpoint_url")
        return self._capabilities.query_tool_capabilities(url)


__all__ = ["ToolRegistry"]
