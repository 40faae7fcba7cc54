"""Service registry Pydantic schemas."""

from typing import Optional

from pydantic import Field

from core.models.common import CamelModel
from core.models.service import ServiceAuthType


class CreateServiceRequest(CamelModel):
    """Service registration request schema."""

    name: str = Field(..., min_length=1, max_length=100, description="Unique service name")
    base_url: str = Field(..., min_length=1, description="Base URL of the backend")
    description: Optional[str] = Field(None, description="Free-form description")
    health_check_path: Optional[str] = Field("/health", description="Health check path")
    auth_type: ServiceAuthType = Field(ServiceAuthType.NONE, description="Backend auth type")


class UpdateServiceRequest(CamelModel):
    """Partial service update request schema."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    base_url: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    health_check_path: Optional[str] = None
    auth_type: Optional[ServiceAuthType] = None
