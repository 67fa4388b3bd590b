"""Health service implementation."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ...realtime import RealtimeHub, get_realtime_hub
from ..redis_client import get_redis_client
from ..schemas.common import HealthCheckResponse
from .interfaces import IHealthService


class HealthService(IHealthService):
    """Health check service implementation."""

    def __init__(self, session: AsyncSession, hub: Optional[RealtimeHub] = None):
        self.session = session
        self.settings = get_settings()
        self.hub = hub or get_realtime_hub()

    async def get_health_status(self) -> HealthCheckResponse:
        """Get app health status.

        Only the database decides healthy/unhealthy; Redis and the backplane
        can be down while the node keeps serving local connections.
        """
        db_health = await self.check_database_health()
        redis_health = await self.check_redis_health()
        realtime_health = self.check_realtime_health()

        if not db_health["connected"]:
            overall_status = "unhealthy"
        elif not redis_health["connected"] or realtime_health["status"] != "healthy":
            overall_status = "degraded"
        else:
            overall_status = "healthy"

        return HealthCheckResponse(
            status=overall_status,
            timestamp=datetime.now(timezone.utc),
            version=self.settings.app_version,
            checks={"database": db_health, "redis": redis_health, "realtime": realtime_health},
        )

    async def check_database_health(self) -> Dict[str, Any]:
        """Check DB connection."""
        try:
            loop = asyncio.get_running_loop()
            start_time = loop.time()
            result = await self.session.execute(text("SELECT 1"))
            result.scalar()
            response_time = (loop.time() - start_time) * 1000

            return {
                "connected": True,
                "status": "healthy",
                "response_time_ms": round(response_time, 2),
            }
        except Exception as e:
            return {
                "connected": False,
                "status": "unhealthy",
                "error": str(e),
                "response_time_ms": 0.0,
            }

    async def check_redis_health(self) -> Dict[str, Any]:
        """Check the shared Redis connection."""
        redis_client = get_redis_client()
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        connected = await redis_client.ping()
        response_time = (loop.time() - start_time) * 1000
        return {
            "connected": connected,
            "status": "healthy" if connected else "unavailable",
            "response_time_ms": round(response_time, 2),
        }

    def check_realtime_health(self) -> Dict[str, Any]:
        stats = self.hub.stats()
        status = "healthy" if stats["backplane"] in (None, "up") else "degraded"
        return {"status": status, **stats}
