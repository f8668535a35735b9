"""Prometheus metrics definitions and utilities for observability.

Metric Naming Conventions:
- All metrics are prefixed with 'neighborguard_'
- Counters end with '_total'

Usage:
    from neighborguard.core.metrics import record_event_created

    record_event_created()
"""

from prometheus_client import REGISTRY, Counter, generate_latest

_registry = REGISTRY

# =============================================================================
# Event Lifecycle Counters
# =============================================================================

EVENTS_CREATED_TOTAL = Counter(
    "neighborguard_events_created_total",
    "Total number of events created",
    registry=_registry,
)

EVENTS_RESOLVED_TOTAL = Counter(
    "neighborguard_events_resolved_total",
    "Total number of events transitioned to resolved",
    registry=_registry,
)

# =============================================================================
# Notification Counters
# =============================================================================

NOTIFICATIONS_CREATED_TOTAL = Counter(
    "neighborguard_notifications_created_total",
    "Total number of notification records created by fan-out",
    labelnames=["type"],
    registry=_registry,
)

NOTIFICATION_FANOUT_FAILURES_TOTAL = Counter(
    "neighborguard_notification_fanout_failures_total",
    "Total number of notification fan-outs that failed and were skipped",
    labelnames=["type"],
    registry=_registry,
)

# =============================================================================
# Helper Functions
# =============================================================================


def record_event_created() -> None:
    """Increment the events created counter."""
    EVENTS_CREATED_TOTAL.inc()


def record_event_resolved() -> None:
    """Increment the events resolved counter."""
    EVENTS_RESOLVED_TOTAL.inc()


def record_notifications_created(notification_type: str, count: int) -> None:
    """Add freshly created notifications to the counter.

    Args:
        notification_type: Notification type value (e.g., "event_created")
        count: Number of notification rows created
    """
    if count > 0:
        NOTIFICATIONS_CREATED_TOTAL.labels(type=notification_type).inc(count)


def record_fanout_failure(notification_type: str) -> None:
    """Increment the fan-out failure counter."""
    NOTIFICATION_FANOUT_FAILURES_TOTAL.labels(type=notification_type).inc()


def get_metrics_response() -> bytes:
    """Generate the Prometheus metrics response.

    Returns:
        Bytes containing the metrics in Prometheus exposition format
    """
    return generate_latest(_registry)  # type: ignore[no-any-return]
