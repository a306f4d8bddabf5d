"""Prometheus metrics for the contacts service."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
)

SYSTEM_INFO = Info("contacts_service", "Contacts service information")

# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------

CONTACTS_CREATED = Counter(
    "contacts_created_total",
    "Contacts persisted",
)

LIST_REQUESTS = Counter(
    "contacts_list_requests_total",
    "Filtered listings by outcome",
    ["outcome"],  # ok, invalid_pattern, storage_error, timeout
)

RECORDS_SCANNED = Counter(
    "contacts_records_scanned_total",
    "Records read from the store by filtered listings",
)

RECORDS_EXCLUDED = Counter(
    "contacts_records_excluded_total",
    "Records removed by the name filter",
)

LIST_LATENCY = Histogram(
    "contacts_list_latency_seconds",
    "Duration of a filtered listing, stream open to result",
    buckets=[0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0],
)

# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

EVENTS_PUBLISHED = Counter(
    "contacts_events_published_total",
    "Contact events delivered to the bus",
    ["topic"],
)

EVENTS_FAILED = Counter(
    "contacts_events_failed_total",
    "Contact events abandoned after exhausting delivery attempts",
    ["topic"],
)

EVENT_ATTEMPT_ERRORS = Counter(
    "contacts_event_attempt_errors_total",
    "Individual delivery attempts that failed",
    ["topic"],
)

EVENTS_DROPPED = Counter(
    "contacts_events_dropped_total",
    "Contact events dropped because the notifier queue stayed full",
    ["topic"],
)

NOTIFIER_QUEUE_DEPTH = Gauge(
    "contacts_notifier_queue_depth",
    "Events waiting for delivery",
)


def start_metrics_server(port: int = 9090, version: str = "0.1.0") -> None:
    """Start Prometheus metrics HTTP server in a background thread."""
    SYSTEM_INFO.info({"version": version})
    start_http_server(port)


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------


def record_contact_created() -> None:
    CONTACTS_CREATED.inc()


def record_list(outcome: str, scanned: int = 0, excluded: int = 0) -> None:
    """Record a filtered listing and how many records it touched."""
    LIST_REQUESTS.labels(outcome=outcome).inc()
    if scanned:
        RECORDS_SCANNED.inc(scanned)
    if excluded:
        RECORDS_EXCLUDED.inc(excluded)


def record_event_published(topic: str) -> None:
    EVENTS_PUBLISHED.labels(topic=topic).inc()


def record_event_attempt_error(topic: str) -> None:
    EVENT_ATTEMPT_ERRORS.labels(topic=topic).inc()


def record_event_failed(topic: str) -> None:
    EVENTS_FAILED.labels(topic=topic).inc()


def record_event_dropped(topic: str) -> None:
    EVENTS_DROPPED.labels(topic=topic).inc()


def update_queue_depth(depth: int) -> None:
    NOTIFIER_QUEUE_DEPTH.set(depth)
