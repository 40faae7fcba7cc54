"""API key Pydantic schemas."""

from typing import Optional

from pydantic import Field

from core.models.api_key import (
    MAX_EXPIRES_IN_DAYS,
    MAX_RATE_LIMIT,
    ApiKeyRecord,
    IssuedApiKey,
)
from core.models.common import CamelModel


class CreateApiKeyRequest(CamelModel):
    """API key creation request schema."""

    name: Optional[str] = Field(None, max_length=255, description="Human-readable key name")
    rate_limit: Optional[int] = Field(
        None, ge=1, le=MAX_RATE_LIMIT, description="Requests per hour"
    )
    expires_in_days: Optional[int] = Field(
        None, ge=1, le=MAX_EXPIRES_IN_DAYS, description="Lifetime in days"
    )
    permissions: Optional[list[str]] = Field(None, description="Service IDs or '*'")


class ApiKeyCreatedResponse(ApiKeyRecord):
    """A new key's record plus the raw key, returned only at creation."""

    key: str = Field(..., description="The raw API key; it is not retrievable again")

    @classmethod
    def from_issued(cls, issued: IssuedApiKey) -> "ApiKeyCreatedResponse":
        """Build the creation response from a freshly issued key."""
        return cls(**issued.record.model_dump(), key=issued.raw_key)
