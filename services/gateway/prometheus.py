"""Prometheus metrics for the gateway.

Counters and histograms for authentication failures, API key lifecycle,
rate limiting and request handling, plus small helpers to update them.
"""

from prometheus_client import Counter, Histogram

# Counters
auth_failures = Counter(
    "gateway_auth_failures_total",
    "Total number of authentication failures",
    ["reason"],
)

api_keys_issued = Counter(
    "gateway_api_keys_issued_total",
    "Total number of API keys issued",
)

api_keys_revoked = Counter(
    "gateway_api_keys_revoked_total",
    "Total number of API keys revoked",
)

rate_limited = Counter(
    "gateway_rate_limited_total",
    "Total number of requests rejected by the API key rate limiter",
)

total_requests = Counter(
    "gateway_requests_total",
    "Total number of HTTP requests handled",
    ["method", "status"],
)

# Histograms
request_duration_ms = Histogram(
    "gateway_request_duration_ms",
    "Request handling time in milliseconds",
    buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000),
)


def record_auth_failure(reason: str) -> None:
    """Record an authentication failure."""
    auth_failures.labels(reason=reason).inc()


def record_api_key_issued() -> None:
    """Record an API key issuance."""
    api_keys_issued.inc()


def record_api_key_revoked() -> None:
    """Record an API key revocation."""
    api_keys_revoked.inc()


def record_rate_limited() -> None:
    """Record a rate-limited request."""
    rate_limited.inc()


def record_request(method: str, status_code: int, duration_ms: float) -> None:
    """Update request counters and the latency histogram."""
    total_requests.labels(method=method, status=str(status_code)).inc()
    request_duration_ms.observe(duration_ms)
