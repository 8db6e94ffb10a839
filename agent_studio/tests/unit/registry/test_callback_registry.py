"""Tests for the callback catalogue."""

from __future__ import annotations

import pytest

from agent_studio.errors import NotFoundError, ValidationError
from agent_studio.registry.callbacks import DEFAULT_CALLBACKS, CallbackRegistry
from agent_studio.registry.models import CallbackDraft, CallbackKind, CallbackPhase, EventKind


def _expression(name: str = "Trace", phase: str = "after_agent") -> CallbackDraft:
    return CallbackDraft(
        name=name,
        phase=phase,
        kind="expression",
        body="callbackContext -> Maybe.empty()",
        tags=["trace", " ", "audit", "trace"],
    )


def test_register_normalizes_enums_and_tags(callback_registry) -> None:
    definition = callback_registry.register(_expression())

    assert definition.phase is CallbackPhase.AFTER_AGENT
    assert definition.kind is CallbackKind.EXPRESSION
    assert definition.tags == ["audit", "trace"]
    assert definition.registered_at == definition.updated_at
    assert callback_registry.get(definition.id).to_dict() == definition.to_dict()


@pytest.mark.parametrize(
    ("draft", "field"),
    [
        (CallbackDraft(name="", phase="BEFORE_AGENT", kind="EXPRESSION", body="x -> x"), "name"),
        (CallbackDraft(name="A", phase="DURING", kind="EXPRESSION", body="x -> x"), "phase"),
        (CallbackDraft(name="A", phase="BEFORE_AGENT", kind="LAMBDA", body="x -> x"), "kind"),
        (CallbackDraft(name="A", phase="BEFORE_AGENT", kind="EXPRESSION", body="  "), "body"),
        (CallbackDraft(name="A", phase="BEFORE_AGENT", kind="NAMED_COMPONENT", body="LoggingCallback"), "body"),
    ],
)
def test_register_rejects_invalid_drafts(callback_registry, draft, field) -> None:
    with pytest.raises(ValidationError) as exc:
        callback_registry.register(draft)

    assert exc.value.field == field


def test_list_by_phase_filters(callback_registry) -> None:
    callback_registry.register(_expression("After"))
    callback_registry.register(_expression("Before", phase="BEFORE_AGENT"))

    assert [item.name for item in callback_registry.list()] == ["After", "Before"]
    assert [item.name for item in callback_registry.list_by_phase("before_agent")] == ["Before"]
    assert [item.name for item in callback_registry.list_by_phase(CallbackPhase.AFTER_AGENT)] == ["After"]
    with pytest.raises(ValidationError):
        callback_registry.list_by_phase("sometime")


def test_update_and_unregister_publish_events(callback_registry, recorded_events) -> None:
    definition = callback_registry.register(_expression())
    recorded_events.attach(callback_registry)

    updated = callback_registry.update(
        definition.id,
        CallbackDraft(
            name="Audit",
            phase="BEFORE_AGENT",
            kind="NAMED_COMPONENT",
            body="com.example.agent.callbacks.LoggingCallback",
        ),
    )
    callback_registry.unregister(definition.id)

    assert updated.kind is CallbackKind.NAMED_COMPONENT
    assert updated.component_package == "com.example.agent.callbacks"
    assert updated.updated_at > updated.registered_at
    assert [event.event_kind for event in recorded_events.items] == [EventKind.UPDATED, EventKind.DELETED]
    with pytest.raises(NotFoundError):
        callback_registry.get(definition.id)


def test_seed_defaults_runs_once_per_store(store, clock) -> None:
    first = CallbackRegistry(store, clock=clock)
    second = CallbackRegistry(store, clock=clock)

    seeded = first.seed_defaults()

    assert [item.id for item in seeded] == [spec["id"] for spec in DEFAULT_CALLBACKS]
    assert all(item.kind is CallbackKind.NAMED_COMPONENT for item in seeded)
    assert all(item.phase is CallbackPhase.BEFORE_AGENT for item in seeded)
    assert second.seed_defaults() == []
    assert len(second.list()) == len(DEFAULT_CALLBACKS)


def test_deleted_defaults_are_not_reseeded(callback_registry) -> None:
    callback_registry.seed_defaults()
    callback_registry.unregister("logging-callback")

    assert callback_registry.seed_defaults() == []
    assert callback_registry.find("logging-callback") is None
