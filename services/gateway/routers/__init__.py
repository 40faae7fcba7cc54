"""Routers for the gateway service."""

from .admin import router as admin_router
from .api_keys import router as api_keys_router
from .auth import router as auth_router
from .logs import router as logs_router
from .services import router as services_router

__all__ = [
    "admin_router",
    "api_keys_router",
    "auth_router",
    "logs_router",
    "services_router",
]
