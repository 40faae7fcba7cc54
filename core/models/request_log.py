"""Request log models."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field

from core.models.common import CamelModel


class RequestLogCreate(CamelModel):
    """Fields captured for one inbound request."""

    method: str
    path: str
    status_code: Optional[int] = None
    response_time: Optional[int] = Field(None, description="Milliseconds")
    request_headers: Optional[Dict[str, Any]] = None
    response_headers: Optional[Dict[str, Any]] = None
    request_body: Optional[str] = None
    response_body: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    error: Optional[str] = None
    api_key_id: Optional[str] = None
    user_id: Optional[str] = None
    service_id: Optional[str] = None


class RequestLog(RequestLogCreate):
    """Stored request log entry."""

    id: str
    created_at: datetime


class DashboardStats(CamelModel):
    """Aggregates over the last 24 hours of request logs."""

    total_requests: int = 0
    active_services: int = 0
    active_api_keys: int = 0
    error_rate: float = 0.0
    avg_response_time: int = 0
