"""Registry of A2A peer agents discovered through their agent cards."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from agent_studio.registry.base import HealthTrackedRegistry, validate_http_url, validate_name
from agent_studio.registry.models import AgentDescriptor, AgentDraft, AgentEntry
from agent_studio.registry.store import MetadataStore
from agent_studio.services.a2a import A2ADiscoveryClient, ConnectivityResult


class AgentRegistry(HealthTrackedRegistry[AgentEntry, AgentDraft]):
    namespace = "agents"
    kind = "agent"
    log_prefix = "[agent-registry]"

    def __init__(
        self,
        store: Optional[MetadataStore] = None,
        *,
        discovery_client: Optional[A2ADiscoveryClient] = None,
        clock=None,
    ) -> None:
        super().__init__(store, clock=clock)
        self._discovery = discovery_client or A2ADiscoveryClient()

    def _validate(self, draft: AgentDraft) -> AgentDraft:
        return AgentDraft(
            name=validate_name(draft.name),
            descriptor_url=validate_http_url(draft.descriptor_url, field="descriptor_url"),
        )

    def _new_entry(self, entry_id: str, draft: AgentDraft, now: datetime) -> AgentEntry:
        return AgentEntry(id=entry_id, name=draft.name, descriptor_url=draft.descriptor_url, registered_at=now)

    def _apply_draft(self, entry: AgentEntry, draft: AgentDraft) -> bool:
        moved = entry.descriptor_url != draft.descriptor_url
        entry.name = draft.name
        entry.descriptor_url = draft.descriptor_url
        return moved

    def _probe(self, entry: AgentEntry) -> AgentDescriptor:
        return self._discovery.fetch_agent_descriptor(entry.descriptor_url)

    def _apply_probe(self, entry: AgentEntry, payload: AgentDescriptor) -> None:
        # The peer's card is authoritative; the registered display name is kept.
        entry.description = payload.description
        entry.supported_transports = list(payload.supported_transports)
        entry.capability_tags = list(payload.capability_tags)
        entry.version = payload.version
        entry.protocol_version = payload.protocol_version
        entry.skills = [dict(skill) for skill in payload.skills]

    def _clear_probe(self, entry: AgentEntry) -> None:
        entry.description = ""
        entry.supported_transports = []
        entry.capability_tags = []
        entry.version = None
        entry.protocol_version = None
        entry.skills = []

    def _decode(self, payload: Dict[str, Any]) -> AgentEntry:
        return AgentEntry.from_dict(payload)

    def find_by_capability(self, tag: str) -> List[AgentEntry]:
        wanted = validate_name(tag, field="capability").lower()
        return [entry for entry in self.list() if wanted in {item.lower() for item in entry.capability_tags}]

    def test_connectivity(self, url: str) -> ConnectivityResult:
        """Probe ``url`` without registering it; reachability failures land in the result."""

        return self._discovery.test_connectivity(validate_http_url(url, field="url"))


__all__ = ["AgentRegistry"]
