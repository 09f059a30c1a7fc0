"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Attendance metrics
join_attempts = Counter(
    'event_join_attempts_total',
    'Total join attempts',
    ['outcome']  # joined, already_joined, event_full, conflict, invalid, not_found, error
)

join_latency = Histogram(
    'event_join_latency_seconds',
    'Join request latency, store round trips included',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

membership_checks = Counter(
    'event_membership_checks_total',
    'Membership (check-join) lookups',
    ['joined']  # true, false
)

# Registry metrics
registry_operations = Counter(
    'event_registry_operations_total',
    'Event registry operations',
    ['operation', 'result']  # create/update/delete, ok/rejected
)

# Storage metrics
store_errors = Counter(
    'store_unavailable_total',
    'Store calls that failed because the backend was unreachable',
    ['operation']
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_join_attempt(outcome: str):
    """Record join attempt by outcome label."""
    join_attempts.labels(outcome=outcome).inc()


def record_membership_check(joined: bool):
    membership_checks.labels(joined=str(joined).lower()).inc()


def record_registry_operation(operation: str, ok: bool):
    registry_operations.labels(operation=operation, result="ok" if ok else "rejected").inc()


def record_store_error(operation: str):
    store_errors.labels(operation=operation).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
