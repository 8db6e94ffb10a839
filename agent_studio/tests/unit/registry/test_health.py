"""Tests for the health state machine."""

from __future__ import annotations

import pytest

from agent_studio.registry.health import is_transition, next_health
from agent_studio.registry.models import HealthState


@pytest.mark.parametrize(
    ("current", "succeeded", "expected"),
    [
        (HealthState.UNKNOWN, True, HealthState.HEALTHY),
        (HealthState.UNKNOWN, False, HealthState.UNREACHABLE),
        (HealthState.HEALTHY, False, HealthState.UNREACHABLE),
        (HealthState.UNREACHABLE, True, HealthState.HEALTHY),
        (HealthState.UNREACHABLE, False, HealthState.UNREACHABLE),
    ],
)
def test_next_health(current: HealthState, succeeded: bool, expected: HealthState) -> None:
    assert next_health(current, succeeded) is expected


def test_same_state_is_not_a_transition() -> None:
    assert is_transition(HealthState.HEALTHY, HealthState.HEALTHY) is False
    assert is_transition(HealthState.UNREACHABLE, HealthState.UNREACHABLE) is False
    assert is_transition(HealthState.UNKNOWN, HealthState.HEALTHY) is True
    assert is_transition(HealthState.HEALTHY, HealthState.UNKNOWN) is False
