"""Catalogue of lifecycle callbacks generated agents can attach."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from agent_studio.errors import NotFoundError, ValidationError
from agent_studio.logger import log
from agent_studio.registry.base import validate_name
from agent_studio.registry.models import (
    CallbackDefinition,
    CallbackDraft,
    CallbackKind,
    CallbackPhase,
    EventKind,
    RegistryEvent,
)
from agent_studio.registry.store import MetadataStore, Subscription, get_metadata_store

_COMPONENT_NAME = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)+$")

DEFAULTS_MARKER = "callbacks:defaults-seeded"

DEFAULT_CALLBACKS = (
    {
        "id": "logging-callback",
        "name": "Logging Callback",
        "description": "Logs every incoming message with timestamp, session id, agent name and invocation id.",
        "body": "com.example.agent.callbacks.LoggingCallback",
        "tags": ["logging", "audit", "debugging"],
    },
    {
        "id": "metrics-callback",
        "name": "Metrics Callback",
        "description": "Counts messages overall and per session to track agent activity.",
        "body": "com.example.agent.callbacks.MetricsCallback",
        "tags": ["metrics", "analytics", "monitoring"],
    },
    {
        "id": "security-callback",
        "name": "Security Callback",
        "description": "Blocks messages containing script tags, javascript: links, eval() calls or inline event handlers.",
        "body": "com.example.agent.callbacks.SecurityCallback",
        "tags": ["security", "validation", "filtering"],
    },
    {
        "id": "rate-limit-callback",
        "name": "Rate Limit Callback",
        "description": "Limits each session to 10 messages per minute and answers with an error past the limit.",
        "body": "com.example.agent.callbacks.RateLimitCallback",
        "tags": ["rate-limiting", "throttling", "protection"],
    },
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_enum(enum_cls, value: Any, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(field, f"must be one of {allowed}") from exc


class CallbackRegistry:
    """CRUD store for callback definitions. Callbacks carry no health."""

    namespace = "callbacks"
    kind = "callback"

    def __init__(
        self,
        store: Optional[MetadataStore] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store or get_metadata_store()
        self._clock = clock or _utcnow

    def _validate(self, draft: CallbackDraft) -> CallbackDraft:
        name = validate_name(draft.name)
        phase = _coerce_enum(CallbackPhase, draft.phase, "phase")
        kind = _coerce_enum(CallbackKind, draft.kind, "kind")
        body = (draft.body or "").strip()
        if not body:
            raise ValidationError("body", "must not be empty")
        if kind is CallbackKind.NAMED_COMPONENT and not _COMPONENT_NAME.match(body):
            raise ValidationError("body", f"'{body}' is not a dotted component name")
        tags = sorted({tag.strip() for tag in draft.tags or [] if tag and tag.strip()})
        return CallbackDraft(
            name=name,
            phase=phase,
            kind=kind,
            body=body,
            description=(draft.description or "").strip(),
            tags=tags,
        )

    def register(self, draft: CallbackDraft, *, entry_id: Optional[str] = None) -> CallbackDefinition:
        draft = self._validate(draft)
        now = self._clock()
        definition = CallbackDefinition(
            id=entry_id or uuid4().hex,
            name=draft.name,
            description=draft.description,
            phase=draft.phase,
            kind=draft.kind,
            body=draft.body,
            tags=draft.tags,
            registered_at=now,
            updated_at=now,
        )
        self._store.put(
            self.namespace,
            definition.id,
            definition.to_dict(),
            event=self._event(EventKind.CREATED, definition),
        )
        log("[callback-registry] Registered callback", id=definition.id, kind=definition.kind.value)
        return definition

    def get(self, entry_id: str) -> CallbackDefinition:
        payload = self._store.get(self.namespace, entry_id)
        if payload is None:
            raise NotFoundError(self.kind, entry_id)
        return CallbackDefinition.from_dict(payload)

    def find(self, entry_id: str) -> Optional[CallbackDefinition]:
        payload = self._store.get(self.namespace, entry_id)
        return CallbackDefinition.from_dict(payload) if payload is not None else None

    def list(self) -> List[CallbackDefinition]:
        definitions = [CallbackDefinition.from_dict(payload) for payload in self._store.list(self.namespace)]
        definitions.sort(key=lambda definition: (definition.name.lower(), definition.id))
        return definitions

    def list_by_phase(self, phase: CallbackPhase | str) -> List[CallbackDefinition]:
        wanted = _coerce_enum(CallbackPhase, phase, "phase")
        return [definition for definition in self.list() if definition.phase is wanted]

    def update(self, entry_id: str, draft: CallbackDraft) -> CallbackDefinition:
        draft = self._validate(draft)
        with self._store.entry_lock(self.namespace, entry_id):
            definition = self.get(entry_id)
            definition.name = draft.name
            definition.description = draft.description
            definition.phase = draft.phase
            definition.kind = draft.kind
            definition.body = draft.body
            definition.tags = draft.tags
            definition.updated_at = self._clock()
            self._store.put(
                self.namespace,
                definition.id,
                definition.to_dict(),
                event=self._event(EventKind.UPDATED, definition),
            )
        log("[callback-registry] Updated callback", id=entry_id)
        return definition

    def unregister(self, entry_id: str) -> None:
        with self._store.entry_lock(self.namespace, entry_id):
            definition = self.get(entry_id)
            removed = self._store.delete(
                self.namespace,
                entry_id,
                event=self._event(EventKind.DELETED, definition),
            )
        if not removed:
            raise NotFoundError(self.kind, entry_id)
        log("[callback-registry] Unregistered callback", id=entry_id)

    def subscribe(self, handler: Callable[[RegistryEvent], None]) -> Subscription:
        return self._store.subscribe(
            self.namespace,
            lambda payload: handler(RegistryEvent.from_dict(payload)),
        )

    def seed_defaults(self) -> List[CallbackDefinition]:
        """Register the built-in named-component callbacks once per store."""

        if not self._store.claim_marker(DEFAULTS_MARKER):
            return []

        seeded: List[CallbackDefinition] = []
        for spec in DEFAULT_CALLBACKS:
            if self.find(spec["id"]) is not None:
                continue
            draft = CallbackDraft(
                name=spec["name"],
                description=spec["description"],
                phase=CallbackPhase.BEFORE_AGENT,
                kind=CallbackKind.NAMED_COMPONENT,
                body=spec["body"],
                tags=list(spec["tags"]),
            )
            seeded.append(self.register(draft, entry_id=spec["id"]))
        log("[callback-registry] Seeded default callbacks", count=len(seeded))
        return seeded

    def _event(self, kind: EventKind, definition: CallbackDefinition) -> Dict[str, Any]:
        return RegistryEvent(event_kind=kind, entry_id=definition.id, entry_snapshot=definition.to_dict()).to_dict()


__all__ = ["CallbackRegistry", "DEFAULT_CALLBACKS"]
