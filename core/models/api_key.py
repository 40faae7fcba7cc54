"""API key models.

``ApiKeyRecord`` is what persists; the raw secret only ever exists inside an
``IssuedApiKey`` returned from issuance.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from core.models.common import CamelModel

# Largest value the integer rate_limit column holds
MAX_RATE_LIMIT = 2**31 - 1
# Lifetimes are capped at 100 years
MAX_EXPIRES_IN_DAYS = 36500


class ApiKeyRecord(CamelModel):
    """API key metadata as stored (hash and display prefix only)."""

    id: str = Field(..., description="API key UUID")
    user_id: str = Field(..., description="Owner user ID")
    name: str = Field(..., description="Human-readable key name")
    key_prefix: str = Field(..., description="First 12 characters of the raw key")
    permissions: list[str] = Field(default_factory=list, description="Service IDs or '*'")
    rate_limit: int = Field(..., description="Requests per hour")
    is_active: bool = Field(True, description="False once revoked")
    last_used_at: Optional[datetime] = Field(None, description="Last successful use")
    expires_at: Optional[datetime] = Field(None, description="Expiry, None for never")
    created_at: datetime = Field(..., description="Creation timestamp")

    def is_expired(self, now: datetime) -> bool:
        """True once ``now`` has reached ``expires_at``."""
        return self.expires_at is not None and self.expires_at <= now


class IssuedApiKey(BaseModel):
    """A freshly issued key: the stored record plus the one-time raw secret."""

    record: ApiKeyRecord
    raw_key: str
