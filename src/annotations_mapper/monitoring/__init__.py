"""Health monitoring for the annotations mapper."""

from .health_monitor import (
    CheckResult,
    GoodToGoStatus,
    HealthCheck,
    HealthMonitor,
    HealthReport,
)

__all__ = [
    "CheckResult",
    "GoodToGoStatus",
    "HealthCheck",
    "HealthMonitor",
    "HealthReport",
]
