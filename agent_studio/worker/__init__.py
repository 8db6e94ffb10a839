"""Background health polling for the registries."""

from .monitor import HealthMonitor

__all__ = ["HealthMonitor"]
