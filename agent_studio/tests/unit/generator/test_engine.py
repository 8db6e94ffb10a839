"""Tests for the agent project generator."""

from __future__ import annotations

import io
import shlex
import zipfile

import pytest
import yaml

from agent_studio.errors import ConnectivityError, UnresolvedReferenceError, ValidationError
from agent_studio.generator import AgentGenerator, AgentSpec, validate_spec
from agent_studio.registry.models import AgentDraft, CallbackDraft, ToolDraft, Transport

SOURCE_DIR = "src/main/java/com/example/echo"


@pytest.fixture
def generator(tool_registry, agent_registry, callback_registry) -> AgentGenerator:
    return AgentGenerator(tool_registry, agent_registry, callback_registry)


def _spec(**overrides) -> AgentSpec:
    values = {
        "agent_name": "Echo",
        "package_identifier": "com.example.echo",
        "provider_credential": "test-key",
    }
    values.update(overrides)
    return AgentSpec(**values)


def test_minimal_spec_produces_complete_project(generator) -> None:
    project = generator.generate(_spec())

    assert project.name == "echo-agent"
    assert project.paths() == [
        "pom.xml",
        "README.md",
        "config.yml",
        "start-server.sh",
        "start-server.bat",
        ".gitignore",
        f"{SOURCE_DIR}/EchoAgent.java",
        f"{SOURCE_DIR}/EchoAgentCardProducer.java",
        f"{SOURCE_DIR}/EchoAgentExecutorProducer.java",
        "src/main/resources/application.properties",
    ]

    agent_source = project.read(f"{SOURCE_DIR}/EchoAgent.java")
    assert agent_source.startswith("package com.example.echo;")
    assert "public class EchoAgent {" in agent_source
    assert '.model("gemini-2.0-flash")' in agent_source
    assert "McpSyncClient" not in agent_source
    assert "io.a2a.client" not in agent_source
    assert "Callbacks()" not in agent_source

    pom = project.read("pom.xml")
    assert "<artifactId>echo-agent</artifactId>" in pom
    assert "a2a-java-sdk-client" not in pom
    assert "<artifactId>mcp</artifactId>" not in pom

    assert "quarkus.http.port=8000" in project.read("src/main/resources/application.properties")


def test_config_yml_records_resolved_settings(generator) -> None:
    project = generator.generate(_spec(description="Echoes input", temperature=0.3, max_tokens=512))

    text = project.read("config.yml")
    document = yaml.safe_load(text)

    assert text.startswith("# Agent configuration generated by Agent Studio\n")
    assert document["agent"] == {
        "name": "Echo",
        "description": "Echoes input",
        "package": "com.example.echo",
        "class": "EchoAgent",
        "port": 8000,
    }
    assert document["model"] == {"model": "gemini-2.0-flash", "temperature": 0.3, "max_tokens": 512}
    assert document["provider"]["credential"] == "test-key"
    assert document["tools"] == []
    assert document["callbacks"] == {"before_agent": [], "after_agent": []}


def test_archive_is_byte_identical_across_runs(generator) -> None:
    first_name, first = generator.generate_archive(_spec())
    second_name, second = generator.generate_archive(_spec())

    assert first_name == second_name == "echo-agent.zip"
    assert first == second
    with zipfile.ZipFile(io.BytesIO(first)) as archive:
        script = archive.getinfo("start-server.sh")
        assert (script.external_attr >> 16) & 0o777 == 0o755
        assert "pom.xml" in archive.namelist()


def test_windows_script_uses_crlf_and_unix_script_quotes_credential(generator) -> None:
    credential = "it's $ecret"
    project = generator.generate(_spec(provider_credential=credential, server_port=9100))

    batch = project.read("start-server.bat")
    assert "\r\n" in batch
    assert "\n" not in batch.replace("\r\n", "")
    assert "set PORT=9100" in batch

    shell = project.read("start-server.sh")
    assert "\r" not in shell
    assert f"GOOGLE_API_KEY={shlex.quote(credential)}" in shell
    assert "DEFAULT_PORT=9100" in shell


def test_unresolved_references_are_all_reported(generator) -> None:
    with pytest.raises(UnresolvedReferenceError) as exc:
        generator.generate(_spec(tool_ids=["missing-tool"], subagent_ids=["ghost"], callback_ids=["nope"]))

    assert exc.value.references == [("tool", "missing-tool"), ("agent", "ghost"), ("callback", "nope")]
    assert exc.value.to_detail()["references"][0] == {"kind": "tool", "id": "missing-tool"}


def test_duplicate_tool_ids_bind_once(generator, tool_registry) -> None:
    weather = tool_registry.register(ToolDraft(name="Weather API", endpoint_url="http://localhost:9000/mcp"))
    search = tool_registry.register(ToolDraft(name="Search", endpoint_url="http://localhost:9001/sse"))

    project = generator.generate(_spec(tool_ids=[weather.id, weather.id, search.id]))

    source = project.read(f"{SOURCE_DIR}/EchoAgent.java")
    assert source.count("MCP_CLIENTS.put(") == 2
    assert "McpSyncClient weatherAPIClient" in source
    assert "McpSyncClient searchClient" in source
    assert '.endpoint("/mcp")' in source
    assert '.sseEndpoint("/sse")' in source
    assert "HttpClientSseClientTransport;" in source
    assert "HttpClientStreamableHttpTransport;" in source
    assert [tool["id"] for tool in yaml.safe_load(project.read("config.yml"))["tools"]] == [weather.id, search.id]
    assert "<artifactId>mcp</artifactId>" in project.read("pom.xml")
    assert project.read(f"{SOURCE_DIR}/EchoAgentCardProducer.java").count("new AgentSkill.Builder()") == 2


def test_colliding_tool_names_get_distinct_bindings(generator, tool_registry) -> None:
    first = tool_registry.register(ToolDraft(name="Search", endpoint_url="http://localhost:9000/mcp"))
    second = tool_registry.register(ToolDraft(name="search", endpoint_url="http://localhost:9001/mcp"))

    project = generator.generate(_spec(tool_ids=[first.id, second.id]))

    source = project.read(f"{SOURCE_DIR}/EchoAgent.java")
    assert "McpSyncClient searchClient" in source
    assert "McpSyncClient search2Client" in source


def test_unreachable_tool_still_generates(generator, tool_registry, capability_client) -> None:
    capability_client.outcomes = [ConnectivityError("http://localhost:9000/mcp", "refused")]
    entry = tool_registry.register(ToolDraft(name="Offline", endpoint_url="http://localhost:9000/mcp"))

    project = generator.generate(_spec(tool_ids=[entry.id]))

    assert yaml.safe_load(project.read("config.yml"))["tools"][0]["capabilities"] == []


def test_subagents_use_their_preferred_transport(generator, agent_registry, discovery_client) -> None:
    discovery_client.publish("http://localhost:9101", name="Planner card", transports=[Transport.REST], tags=["plan"])
    discovery_client.publish("http://localhost:9102", transports=[Transport.GRPC])
    planner = agent_registry.register(AgentDraft(name="Planner", descriptor_url="http://localhost:9101"))
    twin = agent_registry.register(AgentDraft(name="Planner", descriptor_url="http://localhost:9102"))

    project = generator.generate(_spec(subagent_ids=[planner.id, twin.id]))

    source = project.read(f"{SOURCE_DIR}/EchoAgent.java")
    assert "public static Map<String, Object> delegateToPlanner(" in source
    assert "public static Map<String, Object> delegateToPlanner2(" in source
    assert 'delegateToPeer("http://localhost:9101", "REST", message)' in source
    assert 'delegateToPeer("http://localhost:9102", "GRPC", message)' in source
    assert "RestTransport.class" in source
    assert "JSONRPCTransport" not in source

    pom = project.read("pom.xml")
    assert "a2a-java-sdk-client-transport-rest" in pom
    assert "a2a-java-sdk-client-transport-grpc" in pom
    assert "a2a-java-sdk-client-transport-jsonrpc" not in pom

    card = project.read(f"{SOURCE_DIR}/EchoAgentCardProducer.java")
    assert '.tags(List.of("plan"))' in card
    assert '.tags(List.of("delegateToPlanner2"))' in card


def test_callbacks_are_grouped_by_phase(generator, callback_registry) -> None:
    callback_registry.seed_defaults()
    after = callback_registry.register(
        CallbackDraft(
            name="Trace",
            phase="AFTER_AGENT",
            kind="EXPRESSION",
            body="callbackContext -> Maybe.empty()",
        )
    )

    project = generator.generate(_spec(callback_ids=["logging-callback", after.id]))

    source = project.read(f"{SOURCE_DIR}/EchoAgent.java")
    assert ".beforeAgentCallback(beforeAgentCallbacks())" in source
    assert ".afterAgentCallback(afterAgentCallbacks())" in source
    assert "callbacks.add(new com.example.agent.callbacks.LoggingCallback());" in source
    assert "callbacks.add(callbackContext -> Maybe.empty());" in source
    assert "<artifactId>agent-studio-callbacks</artifactId>" in project.read("pom.xml")

    document = yaml.safe_load(project.read("config.yml"))
    assert [item["id"] for item in document["callbacks"]["before_agent"]] == ["logging-callback"]
    assert [item["id"] for item in document["callbacks"]["after_agent"]] == [after.id]


def test_named_component_outside_allowed_packages_is_unresolved(generator, callback_registry) -> None:
    foreign = callback_registry.register(
        CallbackDraft(name="Foreign", phase="BEFORE_AGENT", kind="NAMED_COMPONENT", body="org.other.Hook")
    )
    local = callback_registry.register(
        CallbackDraft(name="Local", phase="BEFORE_AGENT", kind="NAMED_COMPONENT", body="com.example.echo.LocalHook")
    )

    with pytest.raises(UnresolvedReferenceError) as exc:
        generator.generate(_spec(callback_ids=[foreign.id]))
    project = generator.generate(_spec(callback_ids=[local.id]))

    assert exc.value.references == [("callback_component", "org.other.Hook")]
    assert "callbacks.add(new com.example.echo.LocalHook());" in project.read(f"{SOURCE_DIR}/EchoAgent.java")
    assert "agent-studio-callbacks" not in project.read("pom.xml")


def test_names_with_leading_digits_produce_valid_identifiers(generator) -> None:
    project = generator.generate(_spec(agent_name="3D Printer"))

    assert project.name == "3d-printer-agent"
    source = project.read(f"{SOURCE_DIR}/Agent3DPrinterAgent.java")
    assert '.name("agent_3d_printer")' in source
    assert 'AGENT_NAME = "3D Printer";' in source


def test_names_without_ascii_letters_are_rejected(generator) -> None:
    with pytest.raises(ValidationError) as exc:
        generator.generate(_spec(agent_name="日本語"))

    assert exc.value.field == "agent_name"


def test_non_ascii_words_are_dropped_from_identifiers(generator) -> None:
    project = generator.generate(_spec(agent_name="日本語 Helper"))

    assert project.name == "helper-agent"
    assert f"{SOURCE_DIR}/HelperAgent.java" in project.paths()
    assert 'AGENT_NAME = "日本語 Helper";' in project.read(f"{SOURCE_DIR}/HelperAgent.java")


def test_special_characters_are_escaped(generator) -> None:
    project = generator.generate(
        _spec(description='Says "hi" */ twice', instructions='Reply with "echo:" then\nthe input.')
    )

    source = project.read(f"{SOURCE_DIR}/EchoAgent.java")
    assert '.instruction("Reply with \\"echo:\\" then\\nthe input.")' in source
    assert " * Says \"hi\" * / twice" in source


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"agent_name": "!!!"}, "agent_name"),
        ({"package_identifier": "com.example.class"}, "package_identifier"),
        ({"package_identifier": "com example"}, "package_identifier"),
        ({"server_port": 0}, "server_port"),
        ({"server_port": 70000}, "server_port"),
        ({"server_port": True}, "server_port"),
        ({"provider_credential": "  "}, "provider_credential"),
        ({"temperature": 2.5}, "temperature"),
        ({"top_p": 1.5}, "top_p"),
        ({"top_k": 0}, "top_k"),
        ({"max_tokens": 1.5}, "max_tokens"),
        ({"tool_ids": "abc"}, "tool_ids"),
        ({"callback_ids": [""]}, "callback_ids"),
    ],
)
def test_validate_spec_rejects_bad_fields(overrides, field) -> None:
    with pytest.raises(ValidationError) as exc:
        validate_spec(_spec(**overrides))

    assert exc.value.field == field


def test_validate_spec_fills_defaults() -> None:
    spec = validate_spec(_spec(agent_name="  Echo  ", model=" "), default_model="gemini-1.5-flash")

    assert spec.agent_name == "Echo"
    assert spec.model == "gemini-1.5-flash"
    assert validate_spec(_spec()).model == "gemini-2.0-flash"
