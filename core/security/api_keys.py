"""API key secret generation and hashing.

Raw keys are random tokens stored only as their SHA-256 digest plus a short
display prefix.
"""

import hashlib
import secrets

API_KEY_LITERAL_PREFIX = "sk_live_"
API_KEY_RANDOM_BYTES = 24
API_KEY_DISPLAY_PREFIX_LENGTH = 12


def generate_api_key() -> str:
    """Generate a raw API key: the literal prefix followed by 48 hex chars."""
    return f"{API_KEY_LITERAL_PREFIX}{secrets.token_hex(API_KEY_RANDOM_BYTES)}"


def hash_api_key(raw_key: str) -> str:
    """Return the SHA-256 hex digest stored in place of the raw key."""
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


def api_key_prefix(raw_key: str) -> str:
    """Return the part of the raw key kept in clear for display."""
    return raw_key[:API_KEY_DISPLAY_PREFIX_LENGTH]
