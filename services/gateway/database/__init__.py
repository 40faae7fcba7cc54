"""Database module for the gateway.

Stores for accounts, API keys, registered services and request logs, all
sharing one SQLAlchemy async connection pool via DatabaseManager.
"""

from services.gateway.database.accounts import (
    AccountDirectory,
    account_directory,
    get_account_directory,
)
from services.gateway.database.api_keys import ApiKeyStore, api_key_store
from services.gateway.database.models import ApiKey, Base, RequestLog, Service, User
from services.gateway.database.request_logs import (
    RequestLogStore,
    get_request_log_store,
    request_log_store,
)
from services.gateway.database.services import (
    ServiceRegistry,
    get_service_registry,
    service_registry,
)
from services.gateway.database.session import DatabaseManager, db_manager

__all__ = [
    # Models
    "ApiKey",
    "Base",
    "RequestLog",
    "Service",
    "User",
    # Session management
    "DatabaseManager",
    "db_manager",
    # Accounts
    "AccountDirectory",
    "account_directory",
    "get_account_directory",
    # API keys
    "ApiKeyStore",
    "api_key_store",
    # Services
    "ServiceRegistry",
    "get_service_registry",
    "service_registry",
    # Request logs
    "RequestLogStore",
    "get_request_log_store",
    "request_log_store",
]
