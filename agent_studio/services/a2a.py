"""A2A discovery client: fetches and parses peer agent cards."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from agent_studio.config import CONFIG
from agent_studio.errors import ConnectivityError
from agent_studio.registry.base import validate_http_url
from agent_studio.registry.models import AgentDescriptor, Transport

logger = logging.getLogger(__name__)

_TRANSPORT_ALIASES = {
    "JSONRPC": Transport.JSON_RPC,
    "JSON_RPC": Transport.JSON_RPC,
    "JSON-RPC": Transport.JSON_RPC,
    "GRPC": Transport.GRPC,
    "HTTP+JSON": Transport.REST,
    "REST": Transport.REST,
}


def _parse_transport(raw: Any) -> Optional[Transport]:
    if not isinstance(raw, str):
        return None
    return _TRANSPORT_ALIASES.get(raw.strip().upper())


def parse_transports(card: Dict[str, Any]) -> List[Transport]:
    """Return the card's transports, preferred one first, without duplicates."""

    ordered: List[Transport] = []
    candidates = [card.get("preferredTransport")]
    for interface in card.get("additionalInterfaces") or []:
        if isinstance(interface, dict):
            candidates.append(interface.get("transport"))
    for candidate in candidates:
        transport = _parse_transport(candidate)
        if transport is not None and transport not in ordered:
            ordered.append(transport)
    return ordered or [Transport.JSON_RPC]


def parse_capability_tags(card: Dict[str, Any]) -> List[str]:
    tags = set()
    for skill in card.get("skills") or []:
        if not isinstance(skill, dict):
            continue
        for tag in skill.get("tags") or []:
            if isinstance(tag, str) and tag.strip():
                tags.add(tag.strip())
    return sorted(tags)


def descriptor_url_for(url: str, card_path: Optional[str] = None) -> str:
    """Resolve the URL of the agent card published by the peer at ``url``."""

    if url.lower().endswith(".json"):
        return url
    path = card_path or CONFIG.agent_card_path
    return url.rstrip("/") + path


@dataclass(slots=True)
class ConnectivityResult:
    healthy: bool
    descriptor: Optional[AgentDescriptor] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "healthy": self.healthy,
            "descriptor": self.descriptor.to_dict() if self.descriptor else None,
            "error": self.error,
        }


class A2ADiscoveryClient:
    """Fetches an A2A agent card with a bounded timeout."""

    def __init__(self, *, timeout: Optional[float] = None, session: Optional[requests.Session] = None) -> None:
        self._timeout = timeout
        self._http = session or requests

    @property
    def timeout(self) -> float:
        return self._timeout if self._timeout is not None else CONFIG.agent_probe_timeout

    def fetch_agent_descriptor(self, url: str) -> AgentDescriptor:
        card_url = descriptor_url_for(url)
        try:
            response = self._http.get(card_url, timeout=self.timeout, headers={"Accept": "application/json"})
        except requests.RequestException as exc:
            raise ConnectivityError(url, f"agent card request failed: {exc}") from exc

        if response.status_code != 200:
            raise ConnectivityError(url, f"agent card request returned HTTP {response.status_code}")

        try:
            card = response.json()
        except ValueError as exc:
            raise ConnectivityError(url, "agent card is not valid JSON") from exc

        if not isinstance(card, dict) or not card.get("name"):
            raise ConnectivityError(url, "agent card is missing a name")

        logger.debug("Fetched agent card from %s", card_url)
        skills = [dict(skill) for skill in card.get("skills") or [] if isinstance(skill, dict)]
        return AgentDescriptor(
            name=str(card["name"]),
            url=str(card.get("url") or url),
            description=str(card.get("description") or ""),
            version=card.get("version"),
            protocol_version=card.get("protocolVersion"),
            supported_transports=parse_transports(card),
            capability_tags=parse_capability_tags(card),
            skills=skills,
        )

    def test_connectivity(self, url: str) -> ConnectivityResult:
        url = validate_http_url(url, field="url")
        try:
            descriptor = self.fetch_agent_descriptor(url)
        except ConnectivityError as exc:
            return ConnectivityResult(healthy=False, error=exc.reason)
        return ConnectivityResult(healthy=True, descriptor=descriptor)


__all__ = [
    "A2ADiscoveryClient",
    "ConnectivityResult",
    "descriptor_url_for",
    "parse_capability_tags",
    "parse_transports",
]
