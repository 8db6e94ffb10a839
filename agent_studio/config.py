"""Environment-driven runtime settings for the agent studio."""

from __future__ import annotations

import os
from pathlib import Path
from types import SimpleNamespace
from typing import Optional, Sequence, Tuple

from dotenv import load_dotenv


def _env_str(
    name: str,
    default: Optional[str] = None,
    *,
    alias: Optional[str] = None,
    empty_to_none: bool = True,
) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None and alias:
        raw = os.getenv(alias)
    if raw is None:
        return default
    value = raw.strip()
    if not value and empty_to_none:
        return None if default is None else default
    return value if value else default


def _env_bool(name: str, default: bool, *, alias: Optional[str] = None) -> bool:
    raw = os.getenv(name)
    if raw is None and alias:
        raw = os.getenv(alias)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float, *, alias: Optional[str] = None) -> float:
    raw = os.getenv(name)
    if raw is None and alias:
        raw = os.getenv(alias)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_tuple(name: str, default: Sequence[str]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return tuple(default)
    items = tuple(part.strip() for part in raw.split(",") if part.strip())
    return items or tuple(default)


class Settings(SimpleNamespace):
    """Simple attribute container used throughout the codebase."""

CONFIG = Settings()


def _compute_values() -> tuple[dict[str, object], dict[str, object]]:
    # -----------------------------------------------------------------------
    # RUNTIME ENVIRONMENT
    # -----------------------------------------------------------------------
    environment = _env_str("ENV", "prod", alias="ENVIRONMENT", empty_to_none=False).lower()
    if environment not in {"dev", "test", "prod"}:
        environment = "prod"
    is_development = environment in {"dev", "test"}

    # -----------------------------------------------------------------------
    # METADATA STORE
    # -----------------------------------------------------------------------
    redis_url = _env_str("REDIS_URL", "redis://localhost:6379/0", empty_to_none=False)
    metadata_store_backend = (
        _env_str("METADATA_STORE_BACKEND", "memory" if is_development else "redis", empty_to_none=False) or "memory"
    ).lower()
    if metadata_store_backend not in {"memory", "redis"}:
        metadata_store_backend = "memory"
    metadata_key_prefix = _env_str("METADATA_KEY_PREFIX", "agent-studio", empty_to_none=False)
    metadata_lock_timeout = _env_float("METADATA_LOCK_TIMEOUT", 60.0)

    # -----------------------------------------------------------------------
    # PROBES
    # -----------------------------------------------------------------------
    tool_probe_timeout = _env_float("TOOL_PROBE_TIMEOUT", 30.0)
    agent_probe_timeout = _env_float("AGENT_PROBE_TIMEOUT", 10.0)
    agent_card_path = _env_str("AGENT_CARD_PATH", "/.well-known/agent-card.json", empty_to_none=False)
    if not agent_card_path.startswith("/"):
        agent_card_path = f"/{agent_card_path}"

    # -----------------------------------------------------------------------
    # HEALTH MONITORING
    # -----------------------------------------------------------------------
    health_check_interval = max(_env_float("HEALTH_CHECK_INTERVAL", 60.0), 1.0)
    health_monitor_mode = (_env_str("HEALTH_MONITOR_MODE", "thread", empty_to_none=False) or "thread").lower()
    if health_monitor_mode not in {"thread", "celery", "off"}:
        health_monitor_mode = "thread"
    health_check_workers = max(_env_int("HEALTH_CHECK_WORKERS", 8), 1)

    # -----------------------------------------------------------------------
    # CALLBACKS & GENERATION
    # -----------------------------------------------------------------------
    seed_default_callbacks = _env_bool("SEED_DEFAULT_CALLBACKS", True)
    callback_component_packages = _env_tuple("CALLBACK_COMPONENT_PACKAGES", ("com.example.agent.callbacks",))
    callback_component_artifact = _env_str(
        "CALLBACK_COMPONENT_ARTIFACT",
        "com.example.agent:agent-studio-callbacks:1.0.0",
    )
    default_agent_model = _env_str("DEFAULT_AGENT_MODEL", "gemini-2.0-flash", empty_to_none=False)

    # -----------------------------------------------------------------------
    # API & WORKER
    # -----------------------------------------------------------------------
    api_title = _env_str("API_TITLE", "Agent Studio API", empty_to_none=False)
    api_version = _env_str("API_VERSION", "1.0.0", empty_to_none=False)
    api_cors_origins = _env_tuple("API_CORS_ORIGINS", ())
    celery_broker_url = _env_str("CELERY_BROKER_URL", redis_url, empty_to_none=False)
    celery_result_backend = _env_str("CELERY_RESULT_BACKEND", celery_broker_url, empty_to_none=False)

    globals_map = {
        "ENVIRONMENT": environment,
        "IS_DEVELOPMENT": is_development,
        "REDIS_URL": redis_url,
        "METADATA_STORE_BACKEND": metadata_store_backend,
        "METADATA_KEY_PREFIX": metadata_key_prefix,
        "TOOL_PROBE_TIMEOUT": tool_probe_timeout,
        "AGENT_PROBE_TIMEOUT": agent_probe_timeout,
        "HEALTH_CHECK_INTERVAL": health_check_interval,
        "HEALTH_MONITOR_MODE": health_monitor_mode,
    }

    config_map = {
        "environment": environment,
        "is_development": is_development,
        "redis_url": redis_url,
        "metadata_store_backend": metadata_store_backend,
        "metadata_key_prefix": metadata_key_prefix,
        "metadata_lock_timeout": metadata_lock_timeout,
        "tool_probe_timeout": tool_probe_timeout,
        "agent_probe_timeout": agent_probe_timeout,
        "agent_card_path": agent_card_path,
        "health_check_interval": health_check_interval,
        "health_monitor_mode": health_monitor_mode,
        "health_check_workers": health_check_workers,
        "seed_default_callbacks": seed_default_callbacks,
        "callback_component_packages": callback_component_packages,
        "callback_component_artifact": callback_component_artifact,
        "default_agent_model": default_agent_model,
        "api_title": api_title,
        "api_version": api_version,
        "api_cors_origins": api_cors_origins,
        "celery_broker_url": celery_broker_url,
        "celery_result_backend": celery_result_backend,
    }

    return globals_map, config_map


def reload_config() -> None:
    globals_map, config_map = _compute_values()
    globals().update(globals_map)
    CONFIG.__dict__.update(config_map)


def load_envs(env_dir: str | os.PathLike[str] = ".") -> None:
    """Load variables from ``<env_dir>/.env`` and recompute the settings."""

    env_file = Path(env_dir) / ".env"
    if env_file.is_file():
        load_dotenv(env_file)
    reload_config()


# Load once on import so downstream modules can use CONFIG immediately.
reload_config()
