"""Request log and dashboard router.

Endpoints:
- GET /api/logs - Paginated request log, newest first
- GET /api/dashboard/stats - Aggregates over the last 24 hours
"""

from fastapi import APIRouter, Depends, Query

from core.models.request_log import DashboardStats, RequestLog
from core.security.deps import get_current_identity
from services.gateway.database.request_logs import RequestLogStore, get_request_log_store

router = APIRouter(
    prefix="/api",
    tags=["logs"],
    dependencies=[Depends(get_current_identity)],
)


@router.get("/logs", response_model=list[RequestLog])
async def list_logs(
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of entries"),
    offset: int = Query(0, ge=0, description="Number of entries to skip"),
    store: RequestLogStore = Depends(get_request_log_store),
) -> list[RequestLog]:
    """Get request log entries, newest first."""
    return await store.list_logs(limit=limit, offset=offset)


@router.get("/dashboard/stats", response_model=DashboardStats)
async def dashboard_stats(
    store: RequestLogStore = Depends(get_request_log_store),
) -> DashboardStats:
    """
    Get request volume, error rate and average latency for the last 24
    hours, with counts of active services and API keys.
    """
    return await store.dashboard_stats()
