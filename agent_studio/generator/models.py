"""Inputs and outputs of the code generation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Dict, Iterator, List, Optional, Tuple

from agent_studio.errors import GenerationError


@dataclass(slots=True)
class AgentSpec:
    """Declarative description of the agent project to generate."""

    agent_name: str
    package_identifier: str
    provider_credential: str
    description: str = ""
    instructions: str = ""
    server_port: int = 8000
    tool_ids: List[str] = field(default_factory=list)
    subagent_ids: List[str] = field(default_factory=list)
    callback_ids: List[str] = field(default_factory=list)
    model: Optional[str] = None
    temperature: float = 1.0
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    max_tokens: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AgentSpec":
        llm = payload.get("llm") or {}
        return cls(
            agent_name=payload.get("agent_name") or payload.get("name") or "",
            package_identifier=payload.get("package_identifier") or payload.get("package") or "",
            provider_credential=payload.get("provider_credential") or "",
            description=payload.get("description") or "",
            instructions=payload.get("instructions") or "",
            server_port=payload.get("server_port", 8000),
            tool_ids=list(payload.get("tool_ids") or []),
            subagent_ids=list(payload.get("subagent_ids") or []),
            callback_ids=list(payload.get("callback_ids") or []),
            model=payload.get("model") or llm.get("model"),
            temperature=payload.get("temperature", llm.get("temperature", 1.0)),
            top_p=payload.get("top_p", llm.get("top_p")),
            top_k=payload.get("top_k", llm.get("top_k")),
            max_tokens=payload.get("max_tokens", llm.get("max_tokens")),
        )


class GeneratedProject:
    """Ordered, in-memory file tree of a generated project."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._files: Dict[str, str] = {}

    def add(self, path: str, content: str) -> None:
        normalized = self._check_path(path)
        if normalized in self._files:
            raise GenerationError("duplicate path in generated project", path=normalized)
        self._files[normalized] = content

    def read(self, path: str) -> str:
        return self._files[path]

    def paths(self) -> List[str]:
        return list(self._files)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self._files.items())

    def __contains__(self, path: object) -> bool:
        return path in self._files

    def __len__(self) -> int:
        return len(self._files)

    @staticmethod
    def _check_path(path: str) -> str:
        if not path or "\\" in path:
            raise GenerationError("invalid path", path=path or "<empty>")
        candidate = PurePosixPath(path)
        if candidate.is_absolute() or any(part in {"", ".", ".."} for part in path.split("/")):
            raise GenerationError("path must be relative and normalized", path=path)
        return str(candidate)


__all__ = ["AgentSpec", "GeneratedProject"]
