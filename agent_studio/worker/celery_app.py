"""Celery application instance used for background registry health checks."""

from __future__ import annotations

import os
from pathlib import Path

from celery import Celery
from dotenv import load_dotenv

def _should_load_local_env() -> bool:
    env = (os.getenv("ENV") or os.getenv("ENVIRONMENT") or "").lower()
    if env and env != "dev":
        return False
    return Path(".env").is_file()


if _should_load_local_env():  # Only load .env for local development runs
    load_dotenv()

from agent_studio.config import CONFIG, reload_config  # noqa: E402

reload_config()

celery_app = Celery(
    "agent-studio",
    broker=CONFIG.celery_broker_url,
    backend=CONFIG.celery_result_backend,
    include=["agent_studio.worker.tasks"],
)

celery_app.conf.update(
    broker_connection_retry_on_startup=True,
    task_track_started=True,
    worker_prefetch_multiplier=int(os.getenv("CELERY_WORKER_PREFETCH", "1")),
    task_default_queue=os.getenv("CELERY_DEFAULT_QUEUE", "registry"),
    timezone=os.getenv("CELERY_TIMEZONE", "UTC"),
    enable_utc=True,
    beat_schedule={
        "refresh-tools": {
            "task": "registry.refresh_tools",
            "schedule": CONFIG.health_check_interval,
        },
        "refresh-agents": {
            "task": "registry.refresh_agents",
            "schedule": CONFIG.health_check_interval,
        },
    },
)


__all__ = ["celery_app"]
