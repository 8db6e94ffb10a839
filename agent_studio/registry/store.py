"""Key-value metadata store with publish/subscribe used by every registry.

Each registry owns one namespace (``tools``, ``agents``, ``callbacks``). A
namespace is a flat mapping of entry id to JSON record plus one change
channel. Writes and their change notification go through a single store
call so subscribers never observe a write without its event.
"""

from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from functools import lru_cache
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import redis

from agent_studio.config import CONFIG

logger = logging.getLogger(__name__)

EventHandler = Callable[[Dict[str, Any]], None]


class StoreError(Exception):
    """Base class for metadata store failures."""


class Subscription:
    """Handle returned by :meth:`MetadataStore.subscribe`."""

    def __init__(self, closer: Callable[[], None]) -> None:
        self._closer = closer
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._closer()


class MetadataStore:
    """Interface for metadata store implementations."""

    backend_id: str = "base"

    def get(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def list(self, namespace: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def put(self, namespace: str, key: str, value: Dict[str, Any], *, event: Optional[Dict[str, Any]] = None) -> None:
        raise NotImplementedError

    def delete(self, namespace: str, key: str, *, event: Optional[Dict[str, Any]] = None) -> bool:
        raise NotImplementedError

    def publish(self, namespace: str, event: Dict[str, Any]) -> None:
        raise NotImplementedError

    def subscribe(self, namespace: str, handler: EventHandler) -> Subscription:
        raise NotImplementedError

    def entry_lock(self, namespace: str, key: str):
        """Return a context manager serializing mutations of one entry."""

        raise NotImplementedError

    def claim_marker(self, name: str) -> bool:
        """Set a one-shot marker; return ``True`` only for the first caller."""

        raise NotImplementedError


def _dispatch(handler: EventHandler, event: Dict[str, Any]) -> None:
    try:
        handler(event)
    except Exception:  # pragma: no cover
        logger.exception("Registry event subscriber failed for %s", event.get("entry_id"))


class MemoryMetadataStore(MetadataStore):
    """In-process store used for development, tests and single-node runs."""

    backend_id = "memory"

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, str]] = {}
        self._subscribers: Dict[str, List[EventHandler]] = {}
        self._entry_locks: Dict[Tuple[str, str], List[Any]] = {}
        self._markers: set[str] = set()
        self._lock = threading.RLock()

    def get(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            raw = self._data.get(namespace, {}).get(key)
        return json.loads(raw) if raw is not None else None

    def list(self, namespace: str) -> List[Dict[str, Any]]:
        with self._lock:
            snapshot = list(self._data.get(namespace, {}).values())
        return [json.loads(raw) for raw in snapshot]

    def put(self, namespace: str, key: str, value: Dict[str, Any], *, event: Optional[Dict[str, Any]] = None) -> None:
        encoded = json.dumps(value)
        with self._lock:
            self._data.setdefault(namespace, {})[key] = encoded
            if event is not None:
                self._deliver(namespace, event)

    def delete(self, namespace: str, key: str, *, event: Optional[Dict[str, Any]] = None) -> bool:
        with self._lock:
            removed = self._data.get(namespace, {}).pop(key, None) is not None
            if removed and event is not None:
                self._deliver(namespace, event)
        return removed

    def publish(self, namespace: str, event: Dict[str, Any]) -> None:
        with self._lock:
            self._deliver(namespace, event)

    def subscribe(self, namespace: str, handler: EventHandler) -> Subscription:
        with self._lock:
            self._subscribers.setdefault(namespace, []).append(handler)

        def _close() -> None:
            with self._lock:
                handlers = self._subscribers.get(namespace, [])
                if handler in handlers:
                    handlers.remove(handler)

        return Subscription(_close)

    @contextmanager
    def entry_lock(self, namespace: str, key: str) -> Iterator[None]:
        # Locks live only while someone holds or waits on them.
        slot = (namespace, key)
        with self._lock:
            holder = self._entry_locks.setdefault(slot, [threading.Lock(), 0])
            holder[1] += 1
        try:
            with holder[0]:
                yield
        finally:
            with self._lock:
                holder[1] -= 1
                if holder[1] == 0:
                    self._entry_locks.pop(slot, None)

    def claim_marker(self, name: str) -> bool:
        with self._lock:
            if name in self._markers:
                return False
            self._markers.add(name)
            return True

    def _deliver(self, namespace: str, event: Dict[str, Any]) -> None:
        # One decoded copy per subscriber.
        encoded = json.dumps(event)
        for handler in list(self._subscribers.get(namespace, [])):
            _dispatch(handler, json.loads(encoded))


class RedisMetadataStore(MetadataStore):
    """Redis-backed store: one hash per namespace, one pub/sub channel per namespace."""

    backend_id = "redis"

    def __init__(
        self,
        client: Optional[redis.Redis] = None,
        *,
        url: Optional[str] = None,
        prefix: Optional[str] = None,
        lock_timeout: Optional[float] = None,
    ) -> None:
        self._client = client or redis.Redis.from_url(url or CONFIG.redis_url, decode_responses=True)
        self._prefix = prefix or CONFIG.metadata_key_prefix
        self._lock_timeout = lock_timeout if lock_timeout is not None else CONFIG.metadata_lock_timeout

    def hash_key(self, namespace: str) -> str:
        return f"{self._prefix}:{namespace}"

    def channel(self, namespace: str) -> str:
        return f"{self._prefix}:{namespace}:events"

    def get(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        raw = self._client.hget(self.hash_key(namespace), key)
        return json.loads(raw) if raw is not None else None

    def list(self, namespace: str) -> List[Dict[str, Any]]:
        # HGETALL is a single consistent read of the namespace.
        snapshot = self._client.hgetall(self.hash_key(namespace))
        return [json.loads(raw) for raw in snapshot.values()]

    def put(self, namespace: str, key: str, value: Dict[str, Any], *, event: Optional[Dict[str, Any]] = None) -> None:
        pipe = self._client.pipeline(transaction=True)
        pipe.hset(self.hash_key(namespace), key, json.dumps(value))
        if event is not None:
            pipe.publish(self.channel(namespace), json.dumps(event))
        pipe.execute()

    def delete(self, namespace: str, key: str, *, event: Optional[Dict[str, Any]] = None) -> bool:
        pipe = self._client.pipeline(transaction=True)
        pipe.hdel(self.hash_key(namespace), key)
        if event is not None:
            pipe.publish(self.channel(namespace), json.dumps(event))
        results = pipe.execute()
        return bool(results[0])

    def publish(self, namespace: str, event: Dict[str, Any]) -> None:
        self._client.publish(self.channel(namespace), json.dumps(event))

    def subscribe(self, namespace: str, handler: EventHandler) -> Subscription:
        pubsub = self._client.pubsub(ignore_subscribe_messages=True)

        def _on_message(message: Dict[str, Any]) -> None:
            try:
                event = json.loads(message["data"])
            except (TypeError, ValueError):
                logger.warning("Dropping malformed registry event on %s", message.get("channel"))
                return
            _dispatch(handler, event)

        pubsub.subscribe(**{self.channel(namespace): _on_message})
        worker = pubsub.run_in_thread(sleep_time=0.1, daemon=True)

        def _close() -> None:
            worker.stop()
            pubsub.close()

        return Subscription(_close)

    def entry_lock(self, namespace: str, key: str):
        return self._client.lock(
            f"{self._prefix}:{namespace}:lock:{key}",
            timeout=self._lock_timeout,
            blocking_timeout=self._lock_timeout,
        )

    def claim_marker(self, name: str) -> bool:
        return bool(self._client.hsetnx(f"{self._prefix}:meta", name, "1"))


@lru_cache(maxsize=1)
def get_metadata_store() -> MetadataStore:
    """Return the active metadata store based on configuration."""

    backend = (getattr(CONFIG, "metadata_store_backend", None) or "memory").strip().lower()

    if backend == "memory":
        logger.debug("Using in-memory metadata store")
        return MemoryMetadataStore()

    if backend == "redis":
        logger.debug("Using Redis metadata store at %s", CONFIG.redis_url)
        return RedisMetadataStore()

    raise StoreError(f"Unsupported metadata store backend '{backend}'. Set METADATA_STORE_BACKEND to memory or redis.")


__all__ = [
    "EventHandler",
    "MemoryMetadataStore",
    "MetadataStore",
    "RedisMetadataStore",
    "StoreError",
    "Subscription",
    "get_metadata_store",
]
