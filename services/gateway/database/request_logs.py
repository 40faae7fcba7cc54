"""Request log persistence using SQLAlchemy async.

The request log is append-only: this store inserts and queries rows and
has no update or delete operations.
"""

from datetime import datetime, timedelta

from sqlalchemy import func, select

from core.models.common import utcnow
from core.models.request_log import DashboardStats, RequestLogCreate
from core.models.request_log import RequestLog as RequestLogModel
from services.gateway.database.api_keys import ApiKeyStore
from services.gateway.database.models import RequestLog
from services.gateway.database.services import ServiceRegistry
from services.gateway.database.session import DatabaseManager, db_manager


class RequestLogStore:
    """Async store for request log entries and the statistics derived from them."""

    def __init__(self, manager: DatabaseManager = db_manager):
        self._db = manager

    async def record(self, entry: RequestLogCreate) -> RequestLogModel:
        """Append a request log entry."""
        async with self._db.session() as s:
            row = RequestLog(**entry.model_dump())
            s.add(row)
            await s.flush()
            await s.refresh(row)
            return RequestLogModel.model_validate(row)

    async def list_logs(self, limit: int = 100, offset: int = 0) -> list[RequestLogModel]:
        """List request logs, newest first."""
        async with self._db.session() as s:
            result = await s.execute(
                select(RequestLog)
                .order_by(RequestLog.created_at.desc())
                .limit(limit)
                .offset(offset)
            )
            return [RequestLogModel.model_validate(row) for row in result.scalars().all()]

    async def dashboard_stats(self, window: timedelta = timedelta(hours=24)) -> DashboardStats:
        """
        Aggregate request logs over a trailing window.

        Args:
            window: How far back to aggregate

        Returns:
            Request count, error rate (percentage of responses with status
            >= 400), average response time, plus active service and API key
            counts
        """
        since: datetime = utcnow() - window

        async with self._db.session() as s:
            totals = await s.execute(
                select(
                    func.count(RequestLog.id),
                    func.count(RequestLog.id).filter(RequestLog.status_code >= 400),
                    func.coalesce(func.avg(RequestLog.response_time), 0),
                ).where(RequestLog.created_at >= since)
            )
            total_requests, error_count, avg_time = totals.one()

            active_services = await ServiceRegistry(self._db).count_active(session=s)
            active_api_keys = await ApiKeyStore(self._db).count_active(session=s)

        total_requests = int(total_requests or 0)
        error_rate = (int(error_count or 0) / total_requests) * 100 if total_requests else 0.0

        return DashboardStats(
            total_requests=total_requests,
            active_services=active_services,
            active_api_keys=active_api_keys,
            error_rate=error_rate,
            avg_response_time=int(avg_time or 0),
        )


# Global request log store instance
request_log_store = RequestLogStore()


async def get_request_log_store() -> RequestLogStore:
    """Get the request log store instance."""
    return request_log_store
