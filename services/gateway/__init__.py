"""Gateway Service - accounts, tokens and API keys.

This service provides:
- Auth: registration, login, JWT access/refresh tokens and role checks
- API keys: issuance, revocation and authentication with per-key rate limits
- Service registry and request logging for the dashboard
"""

__version__ = "1.0.0"
