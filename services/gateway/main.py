"""Gateway Service - FastAPI application entry point.

Serves the account, token and API key endpoints together with the backend
service registry and request log:
- Auth: registration, login, refresh rotation, current user
- API keys: issue, list, revoke, and X-API-Key authentication
- Admin: user role and status management
- Services and logs: registry CRUD, request log, dashboard stats
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from core.config.settings import Settings, get_settings
from core.exceptions import AuthenticationError, GatewayError, RateLimitExceededError
from core.models.common import ErrorResponse
from core.security.jwt import TokenService
from services.gateway import __version__, prometheus
from services.gateway.database import db_manager
from services.gateway.middleware import (
    close_rate_limit_redis,
    connect_rate_limit_redis,
    log_requests,
)
from services.gateway.routers import (
    admin_router,
    api_keys_router,
    auth_router,
    logs_router,
    services_router,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup and shutdown.

    Startup:
    - Connect the database (creates missing tables)
    - Connect Redis for rate limiting

    Shutdown:
    - Dispose the database pool
    - Close rate limiting Redis
    """
    # Startup
    logger.info("Starting Gateway Service...")

    try:
        await db_manager.connect()
    except Exception as e:
        logger.error(f"Failed to connect database: {e}")

    try:
        await connect_rate_limit_redis()
    except Exception as e:
        logger.error(f"Failed to connect to Redis for rate limiting: {e}")

    logger.info("Gateway Service started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Gateway Service...")

    await db_manager.disconnect()
    await close_rate_limit_redis()

    logger.info("Gateway Service shutdown complete")


def _error_body(code: str, message: str, detail: Optional[str] = None) -> dict:
    return ErrorResponse(error=code, message=message, detail=detail).model_dump(exclude_none=True)


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Render gateway errors and request validation failures as JSON."""

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        headers = {}
        if isinstance(exc, AuthenticationError):
            headers["WWW-Authenticate"] = "Bearer"
            if settings.metrics_enabled:
                prometheus.record_auth_failure(exc.reason)
            logger.info(f"Authentication failed for {request.url.path}: {exc.reason}")
        elif isinstance(exc, RateLimitExceededError):
            headers["Retry-After"] = str(exc.retry_after)

        request.state.error = exc.message
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message),
            headers=headers or None,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
        else:
            message = "Invalid request"

        request.state.error = message
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("validation_error", message),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors."""
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                "internal_server_error",
                "An internal server error occurred",
                detail=str(exc) if settings.debug else None,
            ),
        )


def create_app(settings: Settings) -> FastAPI:
    """
    Build the gateway application.

    Args:
        settings: Settings to build from; the token service is created from
            them and kept on ``app.state.token_service``

    Returns:
        The configured FastAPI application
    """
    app = FastAPI(
        title="Gateway Service",
        description="API gateway accounts, tokens and API keys",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.token_service = TokenService.from_settings(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests_middleware(request: Request, call_next):
        """Log all incoming requests with timing."""
        return await log_requests(request, call_next)

    register_exception_handlers(app, settings)

    # Include routers
    app.include_router(auth_router)
    app.include_router(api_keys_router)
    app.include_router(admin_router)
    app.include_router(services_router)
    app.include_router(logs_router)

    if settings.metrics_enabled:
        app.mount("/metrics/prometheus", make_asgi_app())

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """
        Basic health check endpoint for load balancers.

        Returns:
            Simple health status of the Gateway Service.
        """
        return {
            "status": "healthy",
            "service": "gateway-service",
        }

    return app


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.gateway.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
