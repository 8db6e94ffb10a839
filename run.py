"""Command line entry point for the agent studio.

Usage:
  python run.py api [--host 0.0.0.0] [--port 8080]
  python run.py generate spec.yaml [-o out.zip]
  python run.py refresh {tools,agents,all}
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from agent_studio.config import reload_config  # noqa: E402
from agent_studio.errors import StudioError  # noqa: E402
from agent_studio.logger import log  # noqa: E402


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Register agent collaborators and generate agent projects.")
    commands = parser.add_subparsers(dest="command", required=True)

    api = commands.add_parser("api", help="Serve the HTTP API with uvicorn.")
    api.add_argument("--host", default=os.getenv("API_HOST", "0.0.0.0"))
    api.add_argument("--port", type=int, default=int(os.getenv("API_PORT", "8080")))
    api.add_argument("--reload", action="store_true", help="Reload on code changes (development only).")

    generate = commands.add_parser("generate", help="Generate an agent project from a YAML or JSON spec file.")
    generate.add_argument("spec", type=Path, help="Path to the agent spec.")
    generate.add_argument("-o", "--output", type=Path, help="Archive path (defaults to <project>-agent.zip).")

    refresh = commands.add_parser("refresh", help="Run one health sweep against the configured store.")
    refresh.add_argument("target", choices=("tools", "agents", "all"))

    return parser.parse_args(argv)


def _run_api(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("agent_studio.api.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _run_generate(args: argparse.Namespace) -> int:
    from agent_studio.generator import AgentGenerator, AgentSpec
    from agent_studio.registry.providers import get_agent_registry, get_callback_registry, get_tool_registry

    payload = yaml.safe_load(args.spec.read_text(encoding="utf-8")) or {}
    if not isinstance(payload, dict):
        print(f"{args.spec}: expected a mapping at the top level", file=sys.stderr)
        return 2

    generator = AgentGenerator(get_tool_registry(), get_agent_registry(), get_callback_registry())
    filename, archive = generator.generate_archive(AgentSpec.from_dict(payload))
    output = args.output or Path(filename)
    output.write_bytes(archive)
    log("[cli] Wrote agent archive", path=str(output), size=len(archive))
    return 0


def _run_refresh(args: argparse.Namespace) -> int:
    from agent_studio.registry.providers import get_agent_registry, get_tool_registry

    registries = {"tools": get_tool_registry(), "agents": get_agent_registry()}
    selected = registries if args.target == "all" else {args.target: registries[args.target]}
    summary = {name: registry.refresh_all() for name, registry in selected.items()}
    print(json.dumps(summary, indent=2, sort_keys=True))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    reload_config()
    handlers = {"api": _run_api, "generate": _run_generate, "refresh": _run_refresh}
    try:
        return handlers[args.command](args)
    except StudioError as exc:
        print(json.dumps(exc.to_detail(), indent=2), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
