"""Health and readiness endpoints.

  /health (liveness): is the process alive?  Always 200; ``status``
  reports "degraded" if a dependency check fails.

  /ready (readiness): can this instance take traffic?  503 when the
  configured database cannot be reached, so the load balancer stops
  routing here without restarting the container.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response
from sqlalchemy import text

from lms.db import engine as db_engine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _check_database() -> str:
    if db_engine.engine is None:
        return "not_configured"
    try:
        async with db_engine.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database health check failed")
        return "degraded"
    return "ok"


@router.get("/health")
async def health() -> dict:
    checks = {"database": await _check_database()}
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    if await _check_database() == "degraded":
        return Response(status_code=503)
    return Response(status_code=200)
