"""Probe clients for external collaborators."""

from .a2a import A2ADiscoveryClient, ConnectivityResult
from .mcp import McpCapabilityClient, build_transport, transport_kind

__all__ = [
    "A2ADiscoveryClient",
    "ConnectivityResult",
    "McpCapabilityClient",
    "build_transport",
    "transport_kind",
]
