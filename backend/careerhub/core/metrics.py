"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Admission metrics
admission_requests = Counter(
    'admission_requests_total',
    'Total RSVP admission requests',
    ['outcome']  # seated, waitlisted, duplicate, invalid_input, not_found, error
)

admission_latency = Histogram(
    'admission_latency_seconds',
    'RSVP admission latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

seat_guard_misses = Counter(
    'seat_guard_misses_total',
    'Seated admissions that lost the capacity guard and fell back to the waitlist'
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_admission(outcome: str):
    """Record admission outcome. Outcome: seated, waitlisted, or an error code."""
    admission_requests.labels(outcome=outcome).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
