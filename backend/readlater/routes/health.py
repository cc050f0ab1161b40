"""
Readlater Backend — Health Check Route
========================================

What:  GET /health for load balancer and container probes.
How:   Runs SELECT 1 on the app's engine. The database is the only critical
       dependency (analytics is fire-and-forget), so the status is either
       healthy (200) or unhealthy (503).
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text

from readlater import __version__
from readlater.dependencies import Services, get_services
from readlater.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
    summary="Service health check",
)
async def health_check(services: Services = Depends(get_services)) -> JSONResponse:
    db_status = "connected"
    try:
        async with services.trx.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        logger.warning("Health check: database unreachable: %s", str(e))

    healthy = db_status == "connected"
    body = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(body.model_dump(), status_code=200 if healthy else 503)
