"""Exception hierarchy shared by the registries, probes and generator."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple


class StudioError(Exception):
    """Base exception for agent studio failures."""

    def to_detail(self) -> dict:
        return {"type": type(self).__name__, "message": str(self)}


class ValidationError(StudioError):
    """Raised when submitted input is malformed."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.reason = message

    def to_detail(self) -> dict:
        detail = super().to_detail()
        detail["field"] = self.field
        return detail


class NotFoundError(StudioError):
    """Raised when a registry entry does not exist."""

    def __init__(self, kind: str, entry_id: str) -> None:
        super().__init__(f"{kind} '{entry_id}' not found")
        self.kind = kind
        self.entry_id = entry_id

    def to_detail(self) -> dict:
        detail = super().to_detail()
        detail.update({"kind": self.kind, "id": self.entry_id})
        return detail


class ConnectivityError(StudioError):
    """Raised when a remote endpoint cannot be reached or answers garbage."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason

    def to_detail(self) -> dict:
        detail = super().to_detail()
        detail["url"] = self.url
        return detail


class UnresolvedReferenceError(StudioError):
    """Raised when an agent spec references entries that cannot be resolved."""

    def __init__(self, references: Iterable[Tuple[str, str]]) -> None:
        self.references: List[Tuple[str, str]] = list(references)
        rendered = ", ".join(f"{kind}:{ref}" for kind, ref in self.references)
        super().__init__(f"unresolved references: {rendered}")

    def to_detail(self) -> dict:
        detail = super().to_detail()
        detail["references"] = [{"kind": kind, "id": ref} for kind, ref in self.references]
        return detail


class GenerationError(StudioError):
    """Raised when rendering or packaging a generated project fails."""

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message if path is None else f"{path}: {message}")
        self.path = path


__all__ = [
    "StudioError",
    "ValidationError",
    "NotFoundError",
    "ConnectivityError",
    "UnresolvedReferenceError",
    "GenerationError",
]
