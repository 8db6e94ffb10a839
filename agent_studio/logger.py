"""Lightweight logging helper shared by registries, probes and the generator."""

from __future__ import annotations

import logging
from typing import Any

_LOGGER = logging.getLogger("agent_studio")


def _coerce(parts: tuple[object, ...]) -> str:
    rendered = " ".join(str(part) for part in parts if part is not None)
    return rendered.strip()


def log(*parts: object, level: int = logging.INFO, **metadata: Any) -> None:
    """
    Emit a log message built from ``parts``.

    Keyword metadata (entry ids, urls, health states) is appended to the
    message so it stays greppable without a structured formatter.
    """

    message = _coerce(parts)
    if metadata:
        message = f"{message} | {metadata}"

    if not _LOGGER.handlers and not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO)

    _LOGGER.log(level, message)


__all__ = ["log"]
