"""Backend service registry models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from core.models.common import CamelModel


class ServiceAuthType(str, Enum):
    """How a registered backend expects callers to authenticate."""

    NONE = "none"
    API_KEY = "api_key"
    BEARER = "bearer"


class Service(CamelModel):
    """Registered backend service."""

    id: str = Field(..., description="Service UUID")
    name: str = Field(..., description="Unique service name")
    base_url: str = Field(..., description="Base URL of the backend")
    description: Optional[str] = Field(None, description="Free-form description")
    is_active: bool = Field(True, description="Whether the service is enabled")
    health_check_path: Optional[str] = Field("/health", description="Health check path")
    auth_type: ServiceAuthType = Field(ServiceAuthType.NONE, description="Backend auth type")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
