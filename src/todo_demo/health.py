from __future__ import annotations

import os
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Tuple

import structlog

from .gateway import Gateway

logger = structlog.get_logger(__name__)

Body = Dict[str, Any]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# PUBLIC_INTERFACE
class HealthReporter:
    """
    Computes liveness, readiness and health from process uptime and the
    gateway's connection state.

    Liveness and readiness are independent: liveness never looks at the
    database, readiness is a plain read of ``gateway.is_connected`` and
    ``health`` performs an active probe.
    """

    def __init__(
        self,
        gateway: Gateway,
        version: str,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._gateway = gateway
        self._version = version
        self._clock = clock
        self._started = clock()

    def uptime(self) -> float:
        """Seconds since the reporter was created."""
        return round(self._clock() - self._started, 3)

    def database_state(self) -> str:
        return "connected" if self._gateway.is_connected else "disconnected"

    def liveness(self) -> Body:
        return {
            "status": "alive",
            "pid": os.getpid(),
            "uptime": self.uptime(),
            "timestamp": utc_timestamp(),
        }

    def readiness(self) -> Tuple[bool, Body]:
        ready = self._gateway.is_connected
        return ready, {
            "status": "ready" if ready else "not ready",
            "database": self.database_state(),
            "timestamp": utc_timestamp(),
        }

    async def health(self) -> Tuple[int, Body]:
        """
        Return ``(status_code, body)`` for the health endpoint.

        A gateway that never connected is reported as degraded with 200. A
        connected gateway is pinged; a failing probe yields 503.
        """
        if not self._gateway.is_connected:
            return 200, {
                "status": "healthy",
                "message": "Service running without database",
                "timestamp": utc_timestamp(),
                "uptime": self.uptime(),
                "version": self._version,
                "database": "disconnected",
            }

        try:
            await self._gateway.ping()
        except Exception as exc:
            logger.error("health_probe_failed", error=str(exc))
            return 503, {
                "status": "unhealthy",
                "timestamp": utc_timestamp(),
                "error": "Database ping failed",
                "database": "disconnected",
            }

        return 200, {
            "status": "healthy",
            "message": "Service and database reachable",
            "timestamp": utc_timestamp(),
            "uptime": self.uptime(),
            "version": self._version,
            "database": "connected",
        }
