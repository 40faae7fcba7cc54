"""Middleware for the gateway.

Re-exports request logging and API key rate limiting so they can be
imported from `services.gateway.middleware` directly.
"""

from services.gateway.middleware.logging import log_requests
from services.gateway.middleware.rate_limit import (
    close_rate_limit_redis,
    connect_rate_limit_redis,
    enforce_api_key_rate_limit,
    get_rate_limit_redis,
)

__all__ = [
    "close_rate_limit_redis",
    "connect_rate_limit_redis",
    "enforce_api_key_rate_limit",
    "get_rate_limit_redis",
    "log_requests",
]
