"""Unit tests for the Celery health tasks."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from agent_studio.registry.models import AgentDraft, ToolDraft
from agent_studio.worker import tasks
from agent_studio.worker.celery_app import celery_app


def test_beat_schedule_targets_sweep_tasks() -> None:
    schedule = celery_app.conf.beat_schedule

    assert schedule["refresh-tools"]["task"] == "registry.refresh_tools"
    assert schedule["refresh-agents"]["task"] == "registry.refresh_agents"
    assert "registry.refresh_tool" in celery_app.tasks


def test_refresh_tools_fans_out_one_task_per_entry(monkeypatch: pytest.MonkeyPatch, tool_registry) -> None:
    first = tool_registry.register(ToolDraft(name="Search", endpoint_url="http://localhost:9000/mcp"))
    second = tool_registry.register(ToolDraft(name="Weather", endpoint_url="http://localhost:9001/mcp"))
    scheduled = []
    monkeypatch.setattr(tasks, "get_tool_registry", lambda: tool_registry)
    monkeypatch.setattr(tasks, "refresh_tool", SimpleNamespace(delay=scheduled.append))

    result = tasks.refresh_tools.run()

    assert result == {"scheduled": 2}
    assert sorted(scheduled) == sorted([first.id, second.id])


def test_refresh_agent_returns_health(monkeypatch: pytest.MonkeyPatch, agent_registry, discovery_client) -> None:
    discovery_client.publish("http://localhost:9001")
    entry = agent_registry.register(AgentDraft(name="Planner", descriptor_url="http://localhost:9001"))
    monkeypatch.setattr(tasks, "get_agent_registry", lambda: agent_registry)

    assert tasks.refresh_agent.run(entry.id) == {"id": entry.id, "health": "HEALTHY"}
    assert tasks.refresh_agent.run("gone") == {"id": "gone", "health": None}
