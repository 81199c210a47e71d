"""Prometheus metric helpers."""
from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "nestfarm_requests_total",
    "HTTP requests processed by the API",
    ("method", "path", "status"),
)

REQUEST_LATENCY = Histogram(
    "nestfarm_request_latency_seconds",
    "Latency of HTTP requests processed by the API",
    ("method", "path"),
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
    ),
)

STORAGE_ROLLBACKS = Counter(
    "nestfarm_storage_rollbacks_total",
    "Multi-statement operations rolled back after a storage failure",
    ("operation",),
)


def record_request(method: str, path: str, status_code: int, duration: float) -> None:
    """Record counters and histograms for a processed HTTP request."""

    REQUEST_COUNT.labels(method, path, str(status_code)).inc()
    REQUEST_LATENCY.labels(method, path).observe(duration)


def record_rollback(operation: str) -> None:
    STORAGE_ROLLBACKS.labels(operation).inc()
