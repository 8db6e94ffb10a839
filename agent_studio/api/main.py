"""FastAPI application exposing the agent studio JSON API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import CONFIG
from ..logger import log
from ..worker.monitor import HealthMonitor
from .dependencies import get_agent_registry, get_callback_registry, get_tool_registry
from .routes import agents, callbacks, generator, tools


@asynccontextmanager
async def lifespan(api_app: FastAPI) -> AsyncIterator[None]:
    if CONFIG.seed_default_callbacks:
        get_callback_registry().seed_defaults()

    monitor = None
    if CONFIG.health_monitor_mode == "thread":
        monitor = HealthMonitor(
            [get_tool_registry(), get_agent_registry()],
            interval=CONFIG.health_check_interval,
            max_workers=CONFIG.health_check_workers,
        )
        monitor.start()
    api_app.state.health_monitor = monitor
    log("[api] Agent studio started", store=CONFIG.metadata_store_backend, monitor=CONFIG.health_monitor_mode)
    try:
        yield
    finally:
        if monitor is not None:
            monitor.stop()


app = FastAPI(
    title=CONFIG.api_title,
    version=CONFIG.api_version,
    description=(
        "Registers MCP tool servers, A2A peer agents and lifecycle callbacks, "
        "and generates runnable agent projects that reference them."
    ),
    lifespan=lifespan,
)


def _configure_cors(api_app: FastAPI) -> None:
    origins: List[str] = list(CONFIG.api_cors_origins)
    if not origins:
        return

    api_app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


_configure_cors(app)


@app.get("/health", tags=["health"])  # pragma: no cover - trivial fast check
def healthcheck() -> dict[str, str]:
    """Simple health endpoint for load balancers and smoke tests."""

    return {"status": "ok"}


app.include_router(tools.router, prefix="/v1", tags=["tools"])
app.include_router(agents.router, prefix="/v1", tags=["agents"])
app.include_router(callbacks.router, prefix="/v1", tags=["callbacks"])
app.include_router(generator.router, prefix="/v1", tags=["generator"])
