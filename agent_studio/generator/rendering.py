"""Jinja environment and escaping filters for generated sources."""

from __future__ import annotations

import shlex
from functools import lru_cache
from typing import Any, Dict
from xml.sax.saxutils import escape as xml_escape

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from agent_studio.errors import GenerationError

_JAVA_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def java_string(value: Any) -> str:
    """Render ``value`` as a double-quoted Java string literal."""

    text = "" if value is None else str(value)
    escaped = "".join(_JAVA_ESCAPES.get(char, char) for char in text)
    return f'"{escaped}"'


def one_line(value: Any) -> str:
    text = "" if value is None else str(value)
    return " ".join(text.split()).replace("*/", "* /")


def shell_quote(value: Any) -> str:
    return shlex.quote("" if value is None else str(value))


def bat_value(value: Any) -> str:
    # Inside set "NAME=value" only percent signs and quotes need care.
    text = "" if value is None else str(value)
    return text.replace("%", "%%").replace('"', "")


def props(value: Any) -> str:
    text = "" if value is None else str(value)
    text = text.replace("\\", "\\\\").replace("\n", "\\n").replace("\r", "\\r")
    if text.startswith((" ", "\t")):
        text = "\\" + text
    return text


def xml(value: Any) -> str:
    return xml_escape("" if value is None else str(value))


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("agent_studio.generator", "templates"),
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters.update(
        {
            "java_string": java_string,
            "one_line": one_line,
            "shell_quote": shell_quote,
            "bat_value": bat_value,
            "props": props,
            "xml": xml,
        }
    )
    return env


def render(template_name: str, context: Dict[str, Any]) -> str:
    try:
        return get_environment().get_template(template_name).render(**context)
    except TemplateError as exc:
        raise GenerationError(f"template rendering failed: {exc}", path=template_name) from exc


def static_file(name: str) -> str:
    try:
        source, _, _ = get_environment().loader.get_source(get_environment(), name)
    except TemplateError as exc:
        raise GenerationError(f"missing scaffold file: {exc}", path=name) from exc
    return source


__all__ = [
    "bat_value",
    "get_environment",
    "java_string",
    "one_line",
    "props",
    "render",
    "shell_quote",
    "static_file",
    "xml",
]
