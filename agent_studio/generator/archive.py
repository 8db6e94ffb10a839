"""Deterministic zip packaging for generated projects."""

from __future__ import annotations

import io
import zipfile
from typing import TYPE_CHECKING

from agent_studio.errors import GenerationError

if TYPE_CHECKING:
    from agent_studio.generator.models import GeneratedProject

# Earliest timestamp the zip format can represent.
FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)

_EXECUTABLE_MODE = 0o100755
_REGULAR_MODE = 0o100644


def _mode_for(path: str) -> int:
    return _EXECUTABLE_MODE if path.endswith(".sh") else _REGULAR_MODE


def build_archive(project: "GeneratedProject") -> bytes:
    """Serialize ``project`` into zip bytes with fixed timestamps and permissions."""

    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
            for path, content in project.items():
                info = zipfile.ZipInfo(path, date_time=FIXED_DATE_TIME)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.create_system = 3
                info.external_attr = _mode_for(path) << 16
                archive.writestr(info, content.encode("utf-8"))
    except (OSError, ValueError, zipfile.BadZipFile) as exc:
        raise GenerationError(f"failed to package project: {exc}") from exc
    return buffer.getvalue()


__all__ = ["FIXED_DATE_TIME", "build_archive"]
