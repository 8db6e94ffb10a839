"""
Agent project generator.

Resolves an AgentSpec against the registries, renders the project sources
from the bundled Jinja templates and packages them as a zip archive.
"""

from .archive import build_archive
from .engine import AgentGenerator, ResolvedReferences, validate_spec
from .identity import ProjectIdentity
from .models import AgentSpec, GeneratedProject

__all__ = [
    'AgentGenerator',
    'AgentSpec',
    'GeneratedProject',
    'ProjectIdentity',
    'ResolvedReferences',
    'build_archive',
    'validate_spec',
]
