"""Naming rules that turn an agent spec into project, class and binding identifiers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")
_PACKAGE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*(\.[A-Za-z_$][A-Za-z0-9_$]*)*$")

JAVA_KEYWORDS = frozenset(
    {
        "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char", "class", "const",
        "continue", "default", "do", "double", "else", "enum", "extends", "false", "final", "finally",
        "float", "for", "goto", "if", "implements", "import", "instanceof", "int", "interface", "long",
        "native", "new", "null", "package", "private", "protected", "public", "return", "short",
        "static", "strictfp", "super", "switch", "synchronized", "this", "throw", "throws",
        "transient", "true", "try", "void", "volatile", "while",
    }
)


def _words(value: str) -> List[str]:
    return [word for word in _NON_ALNUM.split(value or "") if word]


def slugify(value: str) -> str:
    return "-".join(word.lower() for word in _words(value))


def class_prefix(value: str) -> str:
    prefix = "".join(word[0].upper() + word[1:] for word in _words(value))
    if prefix and prefix[0].isdigit():
        prefix = f"Agent{prefix}"
    return prefix


def binding_name(value: str, *, fallback: str) -> str:
    words = _words(value)
    if not words:
        return fallback
    first, rest = words[0], words[1:]
    name = first[0].lower() + first[1:] + "".join(word[0].upper() + word[1:] for word in rest)
    if name[0].isdigit() or name in JAVA_KEYWORDS:
        name = fallback + name[0].upper() + name[1:]
    return name


def unique_bindings(names: Iterable[str], *, fallback: str, reserved: Iterable[str] = ()) -> List[str]:
    """Sanitize ``names`` into identifiers, suffixing collisions with 2, 3, ..."""

    taken = set(reserved)
    result: List[str] = []
    for name in names:
        base = binding_name(name, fallback=fallback)
        candidate, counter = base, 2
        while candidate in taken:
            candidate = f"{base}{counter}"
            counter += 1
        taken.add(candidate)
        result.append(candidate)
    return result


def is_valid_package(identifier: str) -> bool:
    if not identifier or not _PACKAGE.match(identifier):
        return False
    return not any(part in JAVA_KEYWORDS for part in identifier.split("."))


@dataclass(slots=True, frozen=True)
class ProjectIdentity:
    """Derived names shared by every rendered file."""

    display_name: str
    slug: str
    project_name: str
    class_prefix: str
    package: str
    package_path: str

    @property
    def agent_class(self) -> str:
        return f"{self.class_prefix}Agent"

    @property
    def source_dir(self) -> str:
        return f"src/main/java/{self.package_path}"

    @property
    def archive_filename(self) -> str:
        return f"{self.project_name}.zip"

    @classmethod
    def from_names(cls, agent_name: str, package: str) -> "ProjectIdentity":
        slug = slugify(agent_name)
        return cls(
            display_name=agent_name.strip(),
            slug=slug,
            project_name=f"{slug}-agent",
            class_prefix=class_prefix(agent_name),
            package=package,
            package_path=package.replace(".", "/"),
        )


__all__ = [
    "JAVA_KEYWORDS",
    "ProjectIdentity",
    "binding_name",
    "class_prefix",
    "is_valid_package",
    "slugify",
    "unique_bindings",
]
