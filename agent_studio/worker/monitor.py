"""In-process health polling for single-node deployments."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence

from agent_studio.registry.base import HealthTrackedRegistry

logger = logging.getLogger(__name__)


class HealthMonitor:
    """Periodically refreshes every entry of the given registries.

    Entries are refreshed in parallel on a bounded pool; entries of the same
    registry never block each other because each refresh only holds its own
    per-entry lock.
    """

    def __init__(
        self,
        registries: Sequence[HealthTrackedRegistry],
        *,
        interval: float,
        max_workers: int = 4,
    ) -> None:
        self._registries: List[HealthTrackedRegistry] = list(registries)
        self._interval = interval
        self._max_workers = max(1, max_workers)
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> Dict[str, Dict[str, Optional[str]]]:
        results: Dict[str, Dict[str, Optional[str]]] = {}
        with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="health-check") as pool:
            for registry in self._registries:
                results[registry.namespace] = registry.refresh_all(executor=pool)
        return results

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="registry-health-monitor", daemon=True)
        self._thread.start()
        logger.info("Health monitor started (interval=%ss)", self._interval)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _loop(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                summary: Any = self.run_once()
            except Exception:  # noqa: BLE001 - keep polling after an unexpected failure
                logger.exception("Health sweep failed")
                continue
            logger.debug("Health sweep finished: %s", summary)


__all__ = ["HealthMonitor"]
