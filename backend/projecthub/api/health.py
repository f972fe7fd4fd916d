"""projecthub.api.health

Health endpoints intended for platform probes.

- /health/live  (liveness): fast, never touches external services.
- /health/ready (readiness): verifies the database with a lightweight query.
"""

import time
from typing import Any, Dict

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from projecthub.core.config import settings
from projecthub.core.logging import get_logger
from projecthub.data.factory import get_data_access_status
from projecthub.db.session import db_manager
from projecthub.services.realtime import get_change_broker

logger = get_logger(__name__)

START_TIME = time.monotonic()

router = APIRouter(prefix="/health", tags=["health"])


def _uptime_seconds() -> int:
    return int(time.monotonic() - START_TIME)


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness() -> Dict[str, Any]:
    """Liveness probe.

    Always returns 200 if the process is running.
    """
    return {
        "ok": True,
        "service": "projecthub-api",
        "version": settings.APP_VERSION,
        "uptime_seconds": _uptime_seconds(),
    }


async def _check_database() -> Dict[str, Any]:
    """Lightweight DB check."""
    if not db_manager.initialized:
        return {"ok": False, "error": "db_not_initialized"}

    try:
        async with db_manager.async_session_factory() as session:
            await session.execute(text("SELECT 1"))
        return {"ok": True}
    except Exception as e:
        logger.warning("DB readiness check failed", error=str(e))
        return {"ok": False, "error": "db_unreachable", "detail": str(e)}


@router.get("/ready")
async def readiness() -> JSONResponse:
    """Readiness probe: 503 until the database answers."""
    database = await _check_database()
    body = {
        "ok": database["ok"],
        "uptime_seconds": _uptime_seconds(),
        "checks": {"database": database},
        "data_access": get_data_access_status(),
        "realtime": get_change_broker().get_metrics(),
    }
    code = status.HTTP_200_OK if database["ok"] else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=body)
