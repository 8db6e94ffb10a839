"""Shared CRUD and health-refresh machinery for the tool and agent registries."""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, TypeVar
from urllib.parse import urlparse
from uuid import uuid4

from agent_studio.errors import ConnectivityError, NotFoundError, ValidationError
from agent_studio.logger import log
from agent_studio.registry.health import is_transition, next_health
from agent_studio.registry.models import EventKind, HealthState, RegistryEvent
from agent_studio.registry.store import MetadataStore, Subscription, get_metadata_store

EntryT = TypeVar("EntryT")
DraftT = TypeVar("DraftT")

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_name(name: Optional[str], *, field: str = "name") -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(field, "must not be empty")
    return cleaned


def validate_http_url(url: Optional[str], *, field: str) -> str:
    cleaned = (url or "").strip()
    if not cleaned:
        raise ValidationError(field, "must not be empty")
    parsed = urlparse(cleaned)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValidationError(field, f"'{cleaned}' is not a valid http(s) URL")
    return cleaned


class HealthTrackedRegistry(Generic[EntryT, DraftT]):
    """Registry of external collaborators whose reachability is probed.

    Subclasses provide the probe and the mapping between drafts, probe
    payloads and entries. Every mutation of an existing entry runs under the
    store's per-entry lock, so a background refresh and a user-initiated
    update of the same id never interleave.
    """

    namespace: str = "base"
    kind: str = "entry"
    log_prefix: str = "[registry]"

    def __init__(
        self,
        store: Optional[MetadataStore] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store or get_metadata_store()
        self._clock = clock or _utcnow

    # -- hooks ---------------------------------------------------------------

    def _validate(self, draft: DraftT) -> DraftT:
        raise NotImplementedError

    def _new_entry(self, entry_id: str, draft: DraftT, now: datetime) -> EntryT:
        raise NotImplementedError

    def _apply_draft(self, entry: EntryT, draft: DraftT) -> bool:
        """Copy submitted fields onto ``entry``; return ``True`` if the probe target changed."""

        raise NotImplementedError

    def _probe(self, entry: EntryT) -> Any:
        raise NotImplementedError

    def _apply_probe(self, entry: EntryT, payload: Any) -> None:
        raise NotImplementedError

    def _clear_probe(self, entry: EntryT) -> None:
        raise NotImplementedError

    def _decode(self, payload: Dict[str, Any]) -> EntryT:
        raise NotImplementedError

    # -- public operations ---------------------------------------------------

    def register(self, draft: DraftT) -> EntryT:
        draft = self._validate(draft)
        entry = self._new_entry(uuid4().hex, draft, self._clock())
        self._sample(entry)
        self._store.put(
            self.namespace,
            entry.id,
            entry.to_dict(),
            event=self._event(EventKind.CREATED, entry),
        )
        log(f"{self.log_prefix} Registered {self.kind}", id=entry.id, name=entry.name, health=entry.health.value)
        return entry

    def get(self, entry_id: str) -> EntryT:
        payload = self._store.get(self.namespace, entry_id)
        if payload is None:
            raise NotFoundError(self.kind, entry_id)
        return self._decode(payload)

    def find(self, entry_id: str) -> Optional[EntryT]:
        payload = self._store.get(self.namespace, entry_id)
        return self._decode(payload) if payload is not None else None

    def list(self) -> List[EntryT]:
        entries = [self._decode(payload) for payload in self._store.list(self.namespace)]
        entries.sort(key=lambda entry: (entry.name.lower(), entry.id))
        return entries

    def update(self, entry_id: str, draft: DraftT) -> EntryT:
        draft = self._validate(draft)
        with self._store.entry_lock(self.namespace, entry_id):
            entry = self.get(entry_id)
            if self._apply_draft(entry, draft):
                self._clear_probe(entry)
            self._sample(entry)
            self._store.put(
                self.namespace,
                entry.id,
                entry.to_dict(),
                event=self._event(EventKind.UPDATED, entry),
            )
        log(f"{self.log_prefix} Updated {self.kind}", id=entry.id, health=entry.health.value)
        return entry

    def unregister(self, entry_id: str) -> None:
        with self._store.entry_lock(self.namespace, entry_id):
            entry = self.get(entry_id)
            removed = self._store.delete(
                self.namespace,
                entry_id,
                event=self._event(EventKind.DELETED, entry),
            )
        if not removed:
            raise NotFoundError(self.kind, entry_id)
        log(f"{self.log_prefix} Unregistered {self.kind}", id=entry_id)

    def refresh(self, entry_id: str) -> EntryT:
        """Probe one entry and persist the outcome.

        A successful probe replaces the capability data wholesale; a failed
        one keeps the previous data. ``last_checked_at`` is always written,
        while an ``UPDATED`` event goes out only when the health state moved.
        """

        with self._store.entry_lock(self.namespace, entry_id):
            entry = self.get(entry_id)
            previous = entry.health
            self._sample(entry)
            changed = is_transition(previous, entry.health)
            self._store.put(
                self.namespace,
                entry.id,
                entry.to_dict(),
                event=self._event(EventKind.UPDATED, entry) if changed else None,
            )
        if changed:
            log(
                f"{self.log_prefix} Health changed",
                id=entry_id,
                previous=previous.value,
                current=entry.health.value,
            )
        return entry

    def try_refresh(self, entry_id: str) -> Optional[HealthState]:
        """Refresh one entry; return its health, or ``None`` if it is gone or the refresh failed."""

        try:
            entry = self.refresh(entry_id)
        except NotFoundError:
            logger.debug("Skipping refresh of deleted %s %s", self.kind, entry_id)
            return None
        except Exception:  # noqa: BLE001 - one entry must not stop a sweep
            logger.exception("Refresh of %s %s failed", self.kind, entry_id)
            return None
        return entry.health

    def refresh_all(
        self,
        entry_ids: Optional[Iterable[str]] = None,
        *,
        executor: Optional[Executor] = None,
    ) -> Dict[str, Optional[str]]:
        """Refresh ``entry_ids`` (default: every entry) and map id to resulting health."""

        ids = list(entry_ids) if entry_ids is not None else [entry.id for entry in self.list()]
        if executor is None:
            states = [self.try_refresh(entry_id) for entry_id in ids]
        else:
            states = list(executor.map(self.try_refresh, ids))
        return {entry_id: state.value if state else None for entry_id, state in zip(ids, states)}

    def status_summary(self) -> Dict[str, int]:
        entries = self.list()
        summary = {"total": len(entries)}
        for state in HealthState:
            summary[state.value] = sum(1 for entry in entries if entry.health is state)
        return summary

    def subscribe(self, handler: Callable[[RegistryEvent], None]) -> Subscription:
        return self._store.subscribe(
            self.namespace,
            lambda payload: handler(RegistryEvent.from_dict(payload)),
        )

    # -- internals -----------------------------------------------------------

    def _sample(self, entry: EntryT) -> bool:
        try:
            payload = self._probe(entry)
        except ConnectivityError as exc:
            log(f"{self.log_prefix} Probe failed", level=logging.WARNING, id=entry.id, url=exc.url, reason=exc.reason)
            succeeded = False
        else:
            self._apply_probe(entry, payload)
            succeeded = True
        entry.health = next_health(entry.health, succeeded)
        entry.last_checked_at = self._clock()
        return succeeded

    def _event(self, kind: EventKind, entry: EntryT) -> Dict[str, Any]:
        return RegistryEvent(event_kind=kind, entry_id=entry.id, entry_snapshot=entry.to_dict()).to_dict()


__all__ = ["HealthTrackedRegistry", "validate_http_url", "validate_name"]
