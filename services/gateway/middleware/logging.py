"""Request logging middleware.

Logs every HTTP request with method, path, status code and duration, and
appends a ``request_logs`` row for API requests. Credentials are redacted
from stored headers, and bodies of endpoints that carry passwords, tokens
or raw API keys are never stored.
"""

import logging
import time
from typing import Optional

from fastapi import Request
from starlette.responses import Response

from core.config.settings import Settings, get_settings
from core.models.request_log import RequestLogCreate
from core.models.user import TokenType
from services.gateway import prometheus
from services.gateway.database.request_logs import request_log_store

logger = logging.getLogger(__name__)

LOGGED_PATH_PREFIX = "/api/"
SENSITIVE_BODY_PATHS = frozenset({"/api/register", "/api/login", "/api/refresh", "/api/api-keys"})
REDACTED_HEADERS = frozenset({"authorization", "x-api-key", "cookie", "set-cookie"})
REDACTED = "[redacted]"


def redact_headers(headers) -> dict[str, str]:
    """Copy headers, masking credential-bearing ones."""
    return {
        name: REDACTED if name.lower() in REDACTED_HEADERS else value
        for name, value in headers.items()
    }


def _truncate(body: bytes, limit: int) -> Optional[str]:
    if not body:
        return None
    return body[:limit].decode("utf-8", errors="replace")


def _user_id_from_request(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    token_service = getattr(request.app.state, "token_service", None)
    if token_service is None:
        return None
    claims = token_service.verify(auth_header[7:], expected_type=TokenType.ACCESS)
    return claims.user_id if claims else None


async def _persist(
    request: Request,
    settings: Settings,
    status_code: int,
    process_time: float,
    request_body: bytes = b"",
    response_headers=None,
    response_body: bytes = b"",
    error: Optional[str] = None,
) -> None:
    entry = RequestLogCreate(
        method=request.method,
        path=request.url.path,
        status_code=status_code,
        response_time=int(process_time),
        request_headers=redact_headers(request.headers),
        response_headers=redact_headers(response_headers) if response_headers else None,
        request_body=_truncate(request_body, settings.request_log_max_body),
        response_body=_truncate(response_body, settings.request_log_max_body),
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("User-Agent"),
        error=error or getattr(request.state, "error", None),
        api_key_id=getattr(request.state, "api_key_id", None),
        user_id=_user_id_from_request(request),
    )
    try:
        await request_log_store.record(entry)
    except Exception as e:
        # Persistence failures never change the response
        logger.error(
            f"Failed to persist request log for {request.method} {request.url.path}: {e}"
        )


async def log_requests(request: Request, call_next):
    """Log all incoming requests with timing."""
    start_time = time.time()
    settings = get_settings()
    path = request.url.path
    persist = settings.request_log_enabled and path.startswith(LOGGED_PATH_PREFIX)
    store_bodies = persist and path not in SENSITIVE_BODY_PATHS

    request_body = await request.body() if store_bodies else b""

    # Process request
    try:
        response = await call_next(request)
    except Exception as e:
        # Unhandled errors are rendered as a 500 further out; record them here
        process_time = (time.time() - start_time) * 1000
        logger.error(
            f"{request.method} {path} status=500 duration={process_time:.2f}ms error={e}"
        )
        if settings.metrics_enabled:
            prometheus.record_request(request.method, 500, process_time)
        if persist:
            await _persist(
                request,
                settings,
                status_code=500,
                process_time=process_time,
                request_body=request_body,
                error=str(e),
            )
        raise

    response_body = b""
    if store_bodies:
        response_body = b"".join([chunk async for chunk in response.body_iterator])
        response = Response(
            content=response_body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )

    # Log request details
    process_time = (time.time() - start_time) * 1000
    logger.info(
        f"{request.method} {path} "
        f"status={response.status_code} "
        f"duration={process_time:.2f}ms"
    )
    if settings.metrics_enabled:
        prometheus.record_request(request.method, response.status_code, process_time)

    if persist:
        await _persist(
            request,
            settings,
            status_code=response.status_code,
            process_time=process_time,
            request_body=request_body,
            response_headers=response.headers,
            response_body=response_body,
        )

    return response
