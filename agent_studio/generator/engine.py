"""Code generation engine: resolves an agent spec and renders the project tree."""

from __future__ import annotations

import dataclasses
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

import yaml

from agent_studio.config import CONFIG
from agent_studio.errors import UnresolvedReferenceError, ValidationError
from agent_studio.generator.archive import build_archive
from agent_studio.generator.identity import ProjectIdentity, is_valid_package, unique_bindings
from agent_studio.generator.models import AgentSpec, GeneratedProject
from agent_studio.generator.rendering import one_line, render, static_file
from agent_studio.logger import log
from agent_studio.registry.agents import AgentRegistry
from agent_studio.registry.callbacks import CallbackRegistry
from agent_studio.registry.models import (
    AgentEntry,
    CallbackDefinition,
    CallbackKind,
    CallbackPhase,
    ToolEntry,
    Transport,
)
from agent_studio.registry.tools import ToolRegistry
from agent_studio.services.mcp import transport_kind

CREDENTIAL_ENV = "GOOGLE_API_KEY"

VERSIONS = {
    "quarkus": "3.8.1",
    "a2a": "0.3.1.Final",
    "adk": "0.3.0",
    "mcp": "0.12.1",
}

CLIENT_TRANSPORT_ARTIFACTS = {
    Transport.JSON_RPC.value: "a2a-java-sdk-client-transport-jsonrpc",
    Transport.REST.value: "a2a-java-sdk-client-transport-rest",
    Transport.GRPC.value: "a2a-java-sdk-client-transport-grpc",
}

MCP_REQUEST_TIMEOUT_SECONDS = 30
PEER_REPLY_TIMEOUT_SECONDS = 60

# Static members of the generated agent class that bindings must not shadow.
_RESERVED_METHODS = (
    "afterAgentCallbacks",
    "beforeAgentCallbacks",
    "callMcpTool",
    "chat",
    "createAgent",
    "delegateToPeer",
    "initializeMcpTools",
    "main",
    "textOf",
)


def _dedupe(ids: Iterable[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for item in ids:
        seen.setdefault(item, None)
    return list(seen)


def _check_ids(values: Any, field_name: str) -> List[str]:
    if values is None:
        return []
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise ValidationError(field_name, "must be a list of ids")
    cleaned: List[str] = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(field_name, "ids must be non-empty strings")
        cleaned.append(value.strip())
    return cleaned


def _check_number(value: Any, field_name: str, low: float, high: Optional[float], *, integer: bool = False):
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValidationError(field_name, "must be a number")
    if integer and int(value) != value:
        raise ValidationError(field_name, "must be an integer")
    if value < low or (high is not None and value > high):
        bound = f"between {low:g} and {high:g}" if high is not None else f">= {low:g}"
        raise ValidationError(field_name, f"must be {bound}")
    return int(value) if integer else float(value)


def validate_spec(spec: AgentSpec, *, default_model: Optional[str] = None) -> AgentSpec:
    """Return a normalized copy of ``spec`` or raise :class:`ValidationError`."""

    agent_name = (spec.agent_name or "").strip()
    if not any(char.isascii() and char.isalnum() for char in agent_name):
        raise ValidationError("agent_name", "must contain at least one ASCII letter or digit")

    package = (spec.package_identifier or "").strip()
    if not is_valid_package(package):
        raise ValidationError("package_identifier", f"'{package}' is not a valid package identifier")

    port = spec.server_port
    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
        raise ValidationError("server_port", "must be an integer between 1 and 65535")

    credential = (spec.provider_credential or "").strip()
    if not credential:
        raise ValidationError("provider_credential", "must not be empty")

    temperature = _check_number(spec.temperature, "temperature", 0.0, 2.0)
    model = (spec.model or "").strip() or default_model or CONFIG.default_agent_model

    return dataclasses.replace(
        spec,
        agent_name=agent_name,
        package_identifier=package,
        provider_credential=credential,
        description=(spec.description or "").strip(),
        instructions=(spec.instructions or "").strip(),
        model=model,
        temperature=1.0 if temperature is None else temperature,
        top_p=_check_number(spec.top_p, "top_p", 0.0, 1.0),
        top_k=_check_number(spec.top_k, "top_k", 1, None, integer=True),
        max_tokens=_check_number(spec.max_tokens, "max_tokens", 1, None, integer=True),
        tool_ids=_check_ids(spec.tool_ids, "tool_ids"),
        subagent_ids=_check_ids(spec.subagent_ids, "subagent_ids"),
        callback_ids=_check_ids(spec.callback_ids, "callback_ids"),
    )


@dataclass(slots=True)
class ResolvedReferences:
    """Point-in-time snapshot of every entry a spec references."""

    tools: List[ToolEntry] = field(default_factory=list)
    subagents: List[AgentEntry] = field(default_factory=list)
    callbacks: List[CallbackDefinition] = field(default_factory=list)


class AgentGenerator:
    """Turns an :class:`AgentSpec` into a :class:`GeneratedProject`.

    Generation is pure apart from the registry reads done while resolving
    references: the same spec against the same registry state always yields
    byte-identical files.
    """

    def __init__(
        self,
        tool_registry: ToolRegistry,
        agent_registry: AgentRegistry,
        callback_registry: CallbackRegistry,
        *,
        component_packages: Optional[Sequence[str]] = None,
        component_artifact: Optional[str] = None,
        default_model: Optional[str] = None,
    ) -> None:
        self._tools = tool_registry
        self._agents = agent_registry
        self._callbacks = callback_registry
        self._component_packages = tuple(
            component_packages if component_packages is not None else CONFIG.callback_component_packages
        )
        self._component_artifact = (
            component_artifact if component_artifact is not None else CONFIG.callback_component_artifact
        )
        self._default_model = default_model

    # -- resolution ----------------------------------------------------------

    def resolve(self, spec: AgentSpec) -> ResolvedReferences:
        resolved = ResolvedReferences()
        missing: List[Tuple[str, str]] = []

        for tool_id in _dedupe(spec.tool_ids):
            entry = self._tools.find(tool_id)
            if entry is None:
                missing.append(("tool", tool_id))
            else:
                resolved.tools.append(entry)

        for agent_id in _dedupe(spec.subagent_ids):
            entry = self._agents.find(agent_id)
            if entry is None:
                missing.append(("agent", agent_id))
            else:
                resolved.subagents.append(entry)

        allowed_packages = set(self._component_packages) | {spec.package_identifier}
        for callback_id in _dedupe(spec.callback_ids):
            definition = self._callbacks.find(callback_id)
            if definition is None:
                missing.append(("callback", callback_id))
                continue
            if definition.kind is CallbackKind.NAMED_COMPONENT and definition.component_package not in allowed_packages:
                missing.append(("callback_component", definition.body))
                continue
            resolved.callbacks.append(definition)

        if missing:
            raise UnresolvedReferenceError(missing)
        return resolved

    # -- generation ----------------------------------------------------------

    def generate(self, spec: AgentSpec) -> GeneratedProject:
        spec = validate_spec(spec, default_model=self._default_model)
        resolved = self.resolve(spec)
        identity = ProjectIdentity.from_names(spec.agent_name, spec.package_identifier)
        context = self._build_context(spec, identity, resolved)

        project = GeneratedProject(identity.project_name)
        project.add("pom.xml", render("pom.xml.j2", context))
        project.add("README.md", render("README.md.j2", context))
        project.add("config.yml", self._render_config(spec, identity, context))
        project.add("start-server.sh", render("start-server.sh.j2", context))
        project.add("start-server.bat", _crlf(render("start-server.bat.j2", context)))
        project.add(".gitignore", static_file("gitignore"))
        source_dir = identity.source_dir
        project.add(f"{source_dir}/{identity.agent_class}.java", render("Agent.java.j2", context))
        project.add(
            f"{source_dir}/{identity.class_prefix}AgentCardProducer.java",
            render("AgentCardProducer.java.j2", context),
        )
        project.add(
            f"{source_dir}/{identity.class_prefix}AgentExecutorProducer.java",
            render("AgentExecutorProducer.java.j2", context),
        )
        project.add("src/main/resources/application.properties", render("application.properties.j2", context))

        log(
            "[generator] Generated project",
            project=identity.project_name,
            tools=len(resolved.tools),
            subagents=len(resolved.subagents),
            callbacks=len(resolved.callbacks),
        )
        return project

    def generate_archive(self, spec: AgentSpec) -> Tuple[str, bytes]:
        """Generate ``spec`` and return ``(archive filename, zip bytes)``."""

        project = self.generate(spec)
        return f"{project.name}.zip", build_archive(project)

    # -- context -------------------------------------------------------------

    def _build_context(
        self,
        spec: AgentSpec,
        identity: ProjectIdentity,
        resolved: ResolvedReferences,
    ) -> Dict[str, Any]:
        tool_bindings = unique_bindings([tool.name for tool in resolved.tools], fallback="tool")
        tools = [_tool_context(tool, binding) for tool, binding in zip(resolved.tools, tool_bindings)]

        agent_bindings = unique_bindings(
            [f"delegate to {agent.name}" for agent in resolved.subagents],
            fallback="delegate",
            reserved=_RESERVED_METHODS,
        )
        subagents = [_agent_context(agent, binding) for agent, binding in zip(resolved.subagents, agent_bindings)]

        callback_list = [_callback_context(definition) for definition in resolved.callbacks]
        before = [item for item in callback_list if item["phase"] == CallbackPhase.BEFORE_AGENT.value]
        after = [item for item in callback_list if item["phase"] == CallbackPhase.AFTER_AGENT.value]
        callback_groups = []
        if before:
            callback_groups.append(("beforeAgent", "BeforeAgentCallback", before))
        if after:
            callback_groups.append(("afterAgent", "AfterAgentCallback", after))

        used_transports = {agent["transport"] for agent in subagents}
        subagent_transports = [transport.value for transport in Transport if transport.value in used_transports]

        adk_name = identity.slug.replace("-", "_")
        if adk_name[0].isdigit():
            adk_name = f"agent_{adk_name}"

        return {
            "identity": identity,
            "adk_name": adk_name,
            "description": spec.description,
            "description_line": one_line(spec.description) or f"{identity.display_name} agent",
            "instructions": spec.instructions or "You are a helpful assistant. Use the available tools to help users.",
            "port": spec.server_port,
            "llm": {
                "model": spec.model,
                "temperature": spec.temperature,
                "top_p": spec.top_p,
                "top_k": spec.top_k,
                "max_tokens": spec.max_tokens,
            },
            "tools": tools,
            "tool_transports": sorted({tool["transport"] for tool in tools}),
            "subagents": subagents,
            "subagent_transports": subagent_transports,
            "client_transport_artifacts": CLIENT_TRANSPORT_ARTIFACTS,
            "callbacks": {"before": before, "after": after},
            "callback_groups": callback_groups,
            "callback_list": callback_list,
            "callback_artifacts": self._callback_artifacts(spec, resolved.callbacks),
            "credential_env": CREDENTIAL_ENV,
            "credential": spec.provider_credential,
            "versions": VERSIONS,
            "tool_timeout": MCP_REQUEST_TIMEOUT_SECONDS,
            "agent_timeout": PEER_REPLY_TIMEOUT_SECONDS,
        }

    def _callback_artifacts(self, spec: AgentSpec, callbacks: List[CallbackDefinition]) -> List[Dict[str, str]]:
        external = any(
            definition.kind is CallbackKind.NAMED_COMPONENT
            and definition.component_package != spec.package_identifier
            for definition in callbacks
        )
        if not external or not self._component_artifact:
            return []
        parts = self._component_artifact.split(":")
        if len(parts) != 3:
            return []
        group, artifact, version = parts
        return [{"group": group, "artifact": artifact, "version": version}]

    def _render_config(self, spec: AgentSpec, identity: ProjectIdentity, context: Dict[str, Any]) -> str:
        model = {key: value for key, value in context["llm"].items() if value is not None}
        document = {
            "agent": {
                "name": identity.display_name,
                "description": spec.description,
                "package": identity.package,
                "class": identity.agent_class,
                "port": spec.server_port,
            },
            "model": model,
            "provider": {
                "credential_env": CREDENTIAL_ENV,
                "credential": spec.provider_credential,
            },
            "tools": [
                {
                    "id": tool["id"],
                    "name": tool["name"],
                    "endpoint": tool["endpoint_url"],
                    "transport": tool["transport"],
                    "capabilities": [capability["name"] for capability in tool["capabilities"]],
                }
                for tool in context["tools"]
            ],
            "subagents": [
                {
                    "id": agent["id"],
                    "name": agent["name"],
                    "url": agent["url"],
                    "transport": agent["transport"],
                    "binding": agent["binding"],
                }
                for agent in context["subagents"]
            ],
            "callbacks": {
                "before_agent": [_callback_config(item) for item in context["callbacks"]["before"]],
                "after_agent": [_callback_config(item) for item in context["callbacks"]["after"]],
            },
        }
        body = yaml.safe_dump(document, sort_keys=False, default_flow_style=False, allow_unicode=True)
        return "# Agent configuration generated by Agent Studio\n" + body


def _tool_context(tool: ToolEntry, binding: str) -> Dict[str, Any]:
    parsed = urlparse(tool.endpoint_url)
    path = parsed.path or "/"
    if parsed.query:
        path = f"{path}?{parsed.query}"
    capabilities = [
        {"name": capability.name, "description": capability.description}
        for capability in tool.capabilities
    ]
    summary = f"Access to {tool.name} MCP tools"
    if capabilities:
        summary = f"{summary}: " + ", ".join(capability["name"] for capability in capabilities)
    return {
        "id": tool.id,
        "name": tool.name,
        "binding": binding,
        "endpoint_url": tool.endpoint_url,
        "base_url": f"{parsed.scheme}://{parsed.netloc}",
        "path": path,
        "transport": transport_kind(tool.endpoint_url),
        "capabilities": capabilities,
        "skill_description": summary,
    }


def _agent_context(agent: AgentEntry, binding: str) -> Dict[str, Any]:
    return {
        "id": agent.id,
        "name": agent.name,
        "binding": binding,
        "url": agent.descriptor_url,
        "transport": agent.preferred_transport.value,
        "skill_tags": list(agent.capability_tags) or [binding],
    }


def _callback_context(definition: CallbackDefinition) -> Dict[str, Any]:
    return {
        "id": definition.id,
        "name": definition.name,
        "phase": definition.phase.value,
        "kind": definition.kind.value,
        "body": definition.body,
    }


def _callback_config(item: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": item["id"], "name": item["name"], "kind": item["kind"], "body": item["body"]}


def _crlf(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\n", "\r\n")


__all__ = ["AgentGenerator", "ResolvedReferences", "validate_spec"]
