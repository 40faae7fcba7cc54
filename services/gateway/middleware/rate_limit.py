"""API key rate limiting using Redis.

Each API key gets a fixed window counter whose allowance is the key's own
``rate_limit``. The check and increment run in one Lua script so that
concurrent requests cannot both slip past the limit.
"""

import logging
from typing import Optional

import redis.asyncio as redis

from core.config.settings import get_settings
from core.exceptions import RateLimitExceededError
from core.models.api_key import ApiKeyRecord
from services.gateway import prometheus

logger = logging.getLogger(__name__)

# Redis client for rate limiting
_rate_limit_redis: Optional[redis.Redis] = None

# Lua script for atomic rate limit check and increment
# Keys: [rate_limit_key]
# Args: [max_requests, window_seconds]
# Returns: request count including this request; a value above
# max_requests means the request is rejected and was not counted
RATE_LIMIT_SCRIPT = """
local key = KEYS[1]
local max_requests = tonumber(ARGV[1])
local window = tonumber(ARGV[2])

local current = redis.call('GET', key)
if current == false then
    redis.call('SETEX', key, window, 1)
    return 1
end

local count = tonumber(current)
if count >= max_requests then
    return count + 1
end

return redis.call('INCR', key)
"""


def rate_limit_key(api_key_id: str) -> str:
    """Redis key holding the request counter for an API key."""
    return f"rate_limit:api_key:{api_key_id}"


async def get_rate_limit_redis() -> redis.Redis:
    """Get or create the Redis client for rate limiting."""
    global _rate_limit_redis
    if _rate_limit_redis is None:
        _rate_limit_redis = redis.from_url(
            get_settings().redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
    return _rate_limit_redis


async def connect_rate_limit_redis() -> None:
    """Connect to Redis for rate limiting during startup."""
    client = await get_rate_limit_redis()
    await client.ping()
    logger.info("Connected to Redis for rate limiting")


async def close_rate_limit_redis() -> None:
    """Close rate limiting Redis connection during shutdown."""
    global _rate_limit_redis
    if _rate_limit_redis:
        await _rate_limit_redis.aclose()
        _rate_limit_redis = None


async def enforce_api_key_rate_limit(
    api_key: ApiKeyRecord,
    redis_client: Optional[redis.Redis] = None,
    window_seconds: Optional[int] = None,
) -> int:
    """
    Count one request against an API key's allowance.

    Args:
        api_key: The authenticated key
        redis_client: Client to use, defaults to the shared rate limit client
        window_seconds: Window length, defaults to settings

    Returns:
        The number of requests made in the current window, this one included

    Raises:
        RateLimitExceededError: If the key has used up its allowance
    """
    window = window_seconds or get_settings().api_key_rate_limit_window
    key = rate_limit_key(api_key.id)

    try:
        client = redis_client or await get_rate_limit_redis()
        script = client.register_script(RATE_LIMIT_SCRIPT)
        current_count = int(await script(keys=[key], args=[api_key.rate_limit, window]))
        if current_count > api_key.rate_limit:
            ttl = await client.ttl(key)
    except redis.RedisError as e:
        # Fail open
        logger.error(f"Rate limiting error for API key {api_key.id}: {e}")
        return 0

    if current_count > api_key.rate_limit:
        prometheus.record_rate_limited()
        raise RateLimitExceededError(api_key.rate_limit, window, retry_after=ttl)

    return current_count
