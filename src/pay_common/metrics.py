"""
Prometheus metrics for the payment method service.

Tracks:
- HTTP request counts, latency and in-flight requests
- Cache operations by outcome (hit, miss, ok, degraded)
- API-key authentication attempts
"""
from prometheus_client import Counter, Gauge, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "route", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    ["method", "route", "status_code"],
    buckets=(0.1, 0.3, 0.5, 0.7, 1.0, 3.0, 5.0, 7.0, 10.0),
)

http_requests_active = Gauge(
    "http_requests_active",
    "Number of active HTTP requests",
)

# Cache metrics
cache_operations_total = Counter(
    "cache_operations_total",
    "Total number of cache operations",
    ["operation", "status"],  # status: HIT, MISS, OK, DEGRADED
)

# Auth metrics
authentication_total = Counter(
    "authentication_total",
    "Total number of API-key authentication attempts",
    ["status"],  # success, failure, missing
)
