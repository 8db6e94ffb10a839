"""Health state machine shared by the tool and agent registries."""

from __future__ import annotations

from agent_studio.registry.models import HealthState

TRANSITIONS = frozenset(
    {
        (HealthState.UNKNOWN, HealthState.HEALTHY),
        (HealthState.UNKNOWN, HealthState.UNREACHABLE),
        (HealthState.HEALTHY, HealthState.UNREACHABLE),
        (HealthState.UNREACHABLE, HealthState.HEALTHY),
    }
)


def next_health(current: HealthState, probe_succeeded: bool) -> HealthState:
    """Return the state an entry moves to after one probe sample.

    There is no terminal state: an unreachable entry keeps being probed and
    recovers on the first successful sample.
    """

    return HealthState.HEALTHY if probe_succeeded else HealthState.UNREACHABLE


def is_transition(previous: HealthState, current: HealthState) -> bool:
    """``True`` when ``previous -> current`` is a real state change."""

    return (previous, current) in TRANSITIONS


__all__ = ["TRANSITIONS", "is_transition", "next_health"]
