"""
ListBoard Backend: Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings both storage backends and reports an aggregate status.
Who:   Called by container health checks, load balancers, and monitoring.

Status levels:
    - healthy:   document store and relational database both answer
    - unhealthy: at least one of them does not
"""

import logging
import time

from fastapi import APIRouter, Request
from sqlalchemy import text

from listboard import __version__
from listboard.database import engine
from listboard.schemas.list import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads; used for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    """
    Check the health of the service and both storage backends.

    Check details:
        MongoDB:    `ping` admin command on the process-wide client
        Relational: SELECT 1 on a pooled connection
    """
    document_status = "connected"
    db_status = "connected"
    overall = "healthy"

    # ── Check MongoDB ─────────────────────────────────────────────────────
    client = getattr(request.app.state, "mongo_client", None)
    try:
        if client is None:
            raise RuntimeError("MongoDB client not initialized")
        await client.admin.command("ping")
    except Exception as e:
        document_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: document store unreachable: %s", str(e))

    # ── Check Relational Database ─────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        document_store=document_status,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
